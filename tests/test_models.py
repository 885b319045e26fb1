"""Tests for term models and text normalization."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from term_resolver.errors import ValidationError
from term_resolver.models import Category, MatchResult, Term
from term_resolver.text import (
    collapse_whitespace,
    compact_text,
    fold_diacritics,
    normalize_apostrophes,
    normalize_text,
    overlaps,
)


class TestCategory:
    """Tests for Category parsing."""

    def test_parse_singular_and_plural(self):
        """Both singular and plural names parse, case-insensitively."""
        assert Category.parse("unit") is Category.UNIT
        assert Category.parse("Units") is Category.UNIT
        assert Category.parse(" abilities ") is Category.ABILITY
        assert Category.parse(Category.KEYWORD) is Category.KEYWORD

    def test_parse_unknown(self):
        """Unknown names raise a validation error listing allowed values."""
        with pytest.raises(ValidationError) as exc_info:
            Category.parse("vehicles")

        assert "unit" in exc_info.value.context["allowed"]

    def test_faction_scoped(self):
        """Factions and keywords are not scoped to a faction."""
        assert Category.UNIT.faction_scoped
        assert Category.STRATAGEM.faction_scoped
        assert not Category.FACTION.faction_scoped
        assert not Category.KEYWORD.faction_scoped

    @pytest.mark.parametrize("category", list(Category))
    def test_every_category_described(self, category):
        """Every category has a plural label and a faction scope."""
        assert category.plural.endswith("s")
        assert isinstance(category.faction_scoped, bool)
        assert Category.parse(category.plural) is category


class TestTerm:
    """Tests for the Term model."""

    def test_category_from_plural(self):
        """Rows may use plural category names."""
        term = Term(name="Necron Warriors", category="units", faction="Necrons")

        assert term.category is Category.UNIT
        assert term.key == ("Necron Warriors", Category.UNIT, "Necrons")

    def test_blank_faction_is_none(self):
        """Blank factions are normalized to None."""
        assert Term(name="Necrons", category="faction", faction="  ").faction is None

    def test_invalid_category(self):
        """Unknown categories fail model validation."""
        with pytest.raises(PydanticValidationError):
            Term(name="Necrons", category="armies")

    def test_empty_name(self):
        """Names must be non-empty."""
        with pytest.raises(PydanticValidationError):
            Term(name="", category="unit")

    def test_frozen(self):
        """Terms are immutable."""
        term = Term(name="Necrons", category="faction")

        with pytest.raises(PydanticValidationError):
            term.name = "Drukhari"


class TestMatchResult:
    """Tests for MatchResult."""

    def test_for_term(self):
        """Results carry the term's category and faction."""
        term = Term(name="Kabalite Warriors", category="unit", faction="Drukhari")

        result = MatchResult.for_term(term, 0.8, "fuzzy")

        assert result.key == ("Kabalite Warriors", Category.UNIT, "Drukhari")
        assert result.to_dict() == {
            "term": "Kabalite Warriors",
            "category": "unit",
            "faction": "Drukhari",
            "confidence": 0.8,
            "matcher_used": "fuzzy",
        }


class TestText:
    """Tests for normalization helpers."""

    def test_normalize_text(self):
        """Punctuation, case, accents and extra spaces are dropped."""
        assert normalize_text("  T'àu   Empire!") == "tau empire"
        assert normalize_text("") == ""

    def test_compact_text(self):
        """Separators are removed entirely."""
        assert compact_text("Deep-Strike") == "deepstrike"
        assert compact_text("Deep Strike") == "deepstrike"

    def test_fold_diacritics(self):
        """Combining marks are stripped."""
        assert fold_diacritics("T'àu") == "T'au"

    def test_normalize_apostrophes(self):
        """Curly apostrophes become straight ones."""
        assert normalize_apostrophes("T’au") == "T'au"

    def test_collapse_whitespace(self):
        """Whitespace collapses, punctuation stays."""
        assert collapse_whitespace("  Neck   Runs! ") == "neck runs!"

    def test_overlaps(self):
        """Containment in either direction counts."""
        assert overlaps("Necrons", "necron")
        assert overlaps("Adeptus Astartes", "Astartes")
        assert not overlaps("Necrons", "Drukhari")
        assert not overlaps("", "Necrons")
