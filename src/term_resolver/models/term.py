"""Catalog term models.

A Term is an immutable snapshot of one catalog entry. The engine never
mutates terms; a changed catalog means a new list of terms.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from term_resolver.errors import ValidationError


class Category(str, Enum):
    """Kinds of catalog entries."""

    UNIT = "unit"
    STRATAGEM = "stratagem"
    ABILITY = "ability"
    FACTION = "faction"
    DETACHMENT = "detachment"
    ENHANCEMENT = "enhancement"
    KEYWORD = "keyword"
    WEAPON = "weapon"

    @property
    def plural(self) -> str:
        """Plural label, as used by callers listing categories."""
        return _PLURALS[self]

    @property
    def faction_scoped(self) -> bool:
        """Whether entries of this category belong to a faction."""
        return _FACTION_SCOPED[self]

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        """Parse a category from its singular or plural name.

        Args:
            value: Category name such as "unit", "Units" or a Category

        Returns:
            Matching Category

        Raises:
            ValidationError: If the name is not a known category
        """
        if isinstance(value, Category):
            return value

        key = str(value).strip().lower()
        for category in cls:
            if key in (category.value, category.plural):
                return category

        raise ValidationError(
            f"Unknown category: {value!r}",
            context={"allowed": ", ".join(c.value for c in cls)},
        )


_PLURALS: dict[Category, str] = {
    Category.UNIT: "units",
    Category.STRATAGEM: "stratagems",
    Category.ABILITY: "abilities",
    Category.FACTION: "factions",
    Category.DETACHMENT: "detachments",
    Category.ENHANCEMENT: "enhancements",
    Category.KEYWORD: "keywords",
    Category.WEAPON: "weapons",
}

_FACTION_SCOPED: dict[Category, bool] = {
    Category.UNIT: True,
    Category.STRATAGEM: True,
    Category.ABILITY: True,
    Category.FACTION: False,
    Category.DETACHMENT: True,
    Category.ENHANCEMENT: True,
    Category.KEYWORD: False,
    Category.WEAPON: False,
}


class Term(BaseModel):
    """A canonical catalog entry."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    category: Category
    faction: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: object) -> Category:
        try:
            return Category.parse(value)  # type: ignore[arg-type]
        except ValidationError as e:
            raise ValueError(e.message) from e

    @field_validator("faction", mode="before")
    @classmethod
    def _blank_faction_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def key(self) -> tuple[str, Category, str | None]:
        """Identity used when merging results from several matchers."""
        return (self.name, self.category, self.faction)
