"""Candidate loading from a catalog source.

The engine never owns catalog data. A ``CandidateSource`` supplies terms
per category and faction filter; ``CandidateLoader`` caches each
``(category, scope)`` list for a short time so a burst of requests sees
one consistent snapshot.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Protocol, Sequence

from pydantic import ValidationError as PydanticValidationError

from term_resolver.catalog.cache import DEFAULT_TTL_SECONDS, TTLCache
from term_resolver.errors import ResourceError, ValidationError, wrap_source_error
from term_resolver.logging import get_logger
from term_resolver.models import Category, Term
from term_resolver.text import normalize_text, overlaps

logger = get_logger(__name__)

ALL_SCOPE = "all"


class CandidateSource(Protocol):
    """Read-only supplier of catalog terms."""

    def fetch(self, category: Category, faction_filters: Sequence[str]) -> list[Term]:
        """Return the terms of one category, limited to the given factions.

        An empty filter means every faction.
        """
        ...


class InMemoryCatalog:
    """Candidate source over a fixed list of terms."""

    def __init__(self, terms: Iterable[Term] = ()):
        self._terms: tuple[Term, ...] = tuple(terms)

    @property
    def terms(self) -> tuple[Term, ...]:
        return self._terms

    def fetch(self, category: Category, faction_filters: Sequence[str]) -> list[Term]:
        """Return terms of a category whose faction overlaps any filter.

        Filters are ignored for categories that don't belong to a faction.
        """
        terms = [t for t in self._terms if t.category is category]
        if not category.faction_scoped or not faction_filters:
            return terms
        return [
            t for t in terms
            if t.faction and any(overlaps(t.faction, f) for f in faction_filters)
        ]

    def __len__(self) -> int:
        return len(self._terms)

    @classmethod
    def from_rows(cls, rows: Iterable[dict[str, Any]]) -> "InMemoryCatalog":
        """Build a catalog from ``{name, category, faction?}`` rows.

        Raises:
            ValidationError: If a row is not a valid term
        """
        terms = []
        for position, row in enumerate(rows):
            try:
                terms.append(Term.model_validate(row))
            except PydanticValidationError as e:
                fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
                raise ValidationError(
                    f"Invalid catalog row at position {position}",
                    context={"fields": fields},
                ) from e
        return cls(terms)


def load_catalog_file(path: Path | str) -> InMemoryCatalog:
    """Load a JSON catalog file.

    Accepts a list of ``{name, category, faction?}`` rows, an object with
    a ``terms`` list, or an object mapping category names to rows:

        {"units": [{"name": "Necron Warriors", "faction": "Necrons"}]}

    Args:
        path: Path to the JSON file

    Returns:
        InMemoryCatalog with every term

    Raises:
        ResourceError: If the file doesn't exist
        ValidationError: If the file or a row is malformed
    """
    path = Path(path)
    if not path.exists():
        raise ResourceError(f"Catalog file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Catalog file is not valid JSON: {path}",
            context={"line": e.lineno, "column": e.colno},
        ) from e

    if isinstance(data, dict) and "terms" in data:
        data = data["terms"]

    if isinstance(data, list):
        rows = data
    elif isinstance(data, dict):
        rows = []
        for category_name, entries in data.items():
            category = Category.parse(category_name)
            if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
                raise ValidationError(
                    f"Catalog section must be a list of objects: {category_name}",
                    context={"file": str(path)},
                )
            rows.extend({**entry, "category": category} for entry in entries)
    else:
        raise ValidationError(f"Unsupported catalog layout: {path}")

    catalog = InMemoryCatalog.from_rows(rows)
    logger.info(f"Loaded catalog with {len(catalog)} terms", extra={"file": str(path)})
    return catalog


def faction_scope(category: Category, faction_filters: Sequence[str] | None) -> str:
    """Cache scope for a category and faction filter.

    Filters are normalized, de-duplicated and sorted so equivalent
    requests share an entry; unscoped categories always use "all".
    """
    if not category.faction_scoped or not faction_filters:
        return ALL_SCOPE
    normalized = sorted({normalize_text(f) for f in faction_filters} - {""})
    return ",".join(normalized) or ALL_SCOPE


class CandidateLoader:
    """Loads candidate terms per category with a TTL cache.

    Example:
        loader = CandidateLoader(InMemoryCatalog(terms))
        loader.load_candidates(["units", "stratagems"], ["Necrons"])
    """

    def __init__(
        self,
        source: CandidateSource,
        cache: TTLCache[tuple[Term, ...]] | None = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ):
        """Initialize the loader.

        Args:
            source: Where terms come from
            cache: Cache to use (a new one with ttl_seconds if omitted)
            ttl_seconds: Lifetime of cached lists
        """
        self.source = source
        self.cache: TTLCache[tuple[Term, ...]] = (
            cache if cache is not None else TTLCache(ttl_seconds)
        )

    def load_category(
        self,
        category: Category | str,
        faction_filters: Sequence[str] | None = None,
    ) -> tuple[Term, ...]:
        """Load one category, from cache when fresh.

        Raises:
            ValidationError: If the category name is unknown
            CatalogSourceError: If the source fails
        """
        category = Category.parse(category)
        scope = faction_scope(category, faction_filters)
        key = (category.value, scope)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        filters = list(faction_filters or []) if scope != ALL_SCOPE else []
        try:
            terms = tuple(self.source.fetch(category, filters))
        except Exception as e:
            raise wrap_source_error(e, category.value, scope) from e

        logger.debug(
            f"Loaded {len(terms)} {category.plural}",
            extra={"scope": scope},
        )
        self.cache.set(key, terms)
        return terms

    def load_candidates(
        self,
        categories: Iterable[Category | str],
        faction_filters: Sequence[str] | None = None,
    ) -> list[Term]:
        """Load several categories as one candidate list.

        Args:
            categories: Category names or Category values
            faction_filters: Faction names; empty or None means all

        Returns:
            Terms of every requested category, in request order
        """
        seen: list[Category] = []
        for category in categories:
            parsed = Category.parse(category)
            if parsed not in seen:
                seen.append(parsed)

        candidates: list[Term] = []
        for category in seen:
            candidates.extend(self.load_category(category, faction_filters))
        return candidates

    def list_valid_names(
        self,
        category: Category | str,
        faction: str | None = None,
    ) -> list[str]:
        """Sorted unique names of one category, for autocomplete."""
        filters = [faction] if faction else None
        return sorted({t.name for t in self.load_category(category, filters)})

    def invalidate(
        self,
        category: Category | str,
        faction_filters: Sequence[str] | None = None,
    ) -> bool:
        """Drop the cached list for one category and scope."""
        category = Category.parse(category)
        return self.cache.invalidate((category.value, faction_scope(category, faction_filters)))

    def invalidate_all(self) -> int:
        """Drop every cached list."""
        return self.cache.invalidate_all()
