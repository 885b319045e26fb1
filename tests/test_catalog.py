"""Tests for the TTL cache, candidate loader and catalog files."""

import json

import pytest

from term_resolver.catalog import (
    CandidateLoader,
    InMemoryCatalog,
    TTLCache,
    faction_scope,
    load_catalog_file,
)
from term_resolver.errors import CatalogSourceError, ResourceError, ValidationError
from term_resolver.models import Category, Term


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class CountingSource:
    """Candidate source that records every fetch."""

    def __init__(self, terms):
        self.catalog = InMemoryCatalog(terms)
        self.calls = []

    def fetch(self, category, faction_filters):
        self.calls.append((category, list(faction_filters)))
        return self.catalog.fetch(category, faction_filters)


class FailingSource:
    """Candidate source whose backend is down."""

    def fetch(self, category, faction_filters):
        raise ConnectionError("database unavailable")


def make_terms():
    return [
        Term(name="Necrons", category="faction"),
        Term(name="Drukhari", category="faction"),
        Term(name="Necron Warriors", category="unit", faction="Necrons"),
        Term(name="Immortals", category="unit", faction="Necrons"),
        Term(name="Kabalite Warriors", category="unit", faction="Drukhari"),
        Term(name="Protocol of the Eternal Revenant", category="stratagem", faction="Necrons"),
    ]


class TestTTLCache:
    """Tests for TTLCache."""

    def test_get_within_ttl(self):
        """Entries are returned until their lifetime ends."""
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("units", ["Immortals"])

        clock.now += 9.9
        assert cache.get("units") == ["Immortals"]

    def test_expires_at_ttl(self):
        """An entry exactly ttl old has expired and is dropped."""
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("units", ["Immortals"])

        clock.now += 10
        assert cache.get("units") is None
        assert len(cache) == 0

    def test_set_refreshes(self):
        """Setting again restarts the lifetime."""
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("units", ["Immortals"])
        clock.now += 8
        cache.set("units", ["Immortals", "Lychguard"])
        clock.now += 8

        assert cache.get("units") == ["Immortals", "Lychguard"]

    def test_missing(self):
        """Unknown keys give None."""
        assert TTLCache().get("nope") is None

    def test_invalidate(self):
        """Entries can be dropped singly or all at once."""
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False
        assert cache.invalidate_all() == 1
        assert len(cache) == 0

    def test_invalid_ttl(self):
        """Lifetimes must be positive."""
        with pytest.raises(ValueError):
            TTLCache(ttl_seconds=0)


class TestInMemoryCatalog:
    """Tests for InMemoryCatalog."""

    def test_fetch_by_category(self):
        """Only the requested category is returned."""
        catalog = InMemoryCatalog(make_terms())

        names = [t.name for t in catalog.fetch(Category.UNIT, [])]

        assert names == ["Necron Warriors", "Immortals", "Kabalite Warriors"]

    def test_fetch_with_faction_filter(self):
        """Faction filters match by overlap."""
        catalog = InMemoryCatalog(make_terms())

        names = [t.name for t in catalog.fetch(Category.UNIT, ["necron"])]

        assert names == ["Necron Warriors", "Immortals"]

    def test_filter_ignored_for_unscoped(self):
        """Factions themselves are never filtered by faction."""
        catalog = InMemoryCatalog(make_terms())

        assert len(catalog.fetch(Category.FACTION, ["Necrons"])) == 2

    def test_from_rows_invalid(self):
        """Invalid rows name their position."""
        with pytest.raises(ValidationError) as exc_info:
            InMemoryCatalog.from_rows([{"name": "Necrons", "category": "faction"}, {"name": ""}])

        assert "position 1" in exc_info.value.message


class TestFactionScope:
    """Tests for faction_scope."""

    def test_normalized_and_sorted(self):
        """Equivalent filters share one scope."""
        assert faction_scope(Category.UNIT, ["Necrons", " drukhari "]) == "drukhari,necrons"
        assert faction_scope(Category.UNIT, ["NECRONS", "necrons"]) == "necrons"

    def test_all(self):
        """No filter, or an unscoped category, means everything."""
        assert faction_scope(Category.UNIT, None) == "all"
        assert faction_scope(Category.UNIT, []) == "all"
        assert faction_scope(Category.UNIT, ["  "]) == "all"
        assert faction_scope(Category.FACTION, ["Necrons"]) == "all"


class TestCandidateLoader:
    """Tests for CandidateLoader."""

    def test_caches_per_category_and_scope(self):
        """A repeated request is served from cache."""
        source = CountingSource(make_terms())
        loader = CandidateLoader(source)

        first = loader.load_category("units", ["Necrons"])
        second = loader.load_category(Category.UNIT, [" necrons "])

        assert first == second
        assert len(source.calls) == 1

    def test_different_scopes_fetch_separately(self):
        """Different filters are different cache entries."""
        source = CountingSource(make_terms())
        loader = CandidateLoader(source)

        loader.load_category("units", ["Necrons"])
        loader.load_category("units", ["Drukhari"])
        loader.load_category("units")

        assert [filters for _, filters in source.calls] == [["Necrons"], ["Drukhari"], []]

    def test_unscoped_category_ignores_filters(self):
        """Factions load once whatever the filter."""
        source = CountingSource(make_terms())
        loader = CandidateLoader(source)

        loader.load_category("factions", ["Necrons"])
        loader.load_category("factions", ["Drukhari"])

        assert source.calls == [(Category.FACTION, [])]

    def test_expiry_refetches(self):
        """Expired lists are fetched again."""
        clock = FakeClock()
        source = CountingSource(make_terms())
        loader = CandidateLoader(source, cache=TTLCache(ttl_seconds=300, clock=clock))

        loader.load_category("units")
        clock.now += 300
        loader.load_category("units")

        assert len(source.calls) == 2

    def test_load_candidates(self):
        """Several categories load as one list in request order."""
        loader = CandidateLoader(InMemoryCatalog(make_terms()))

        candidates = loader.load_candidates(["stratagems", "factions", "stratagem"], ["Necrons"])

        assert [t.name for t in candidates] == [
            "Protocol of the Eternal Revenant",
            "Necrons",
            "Drukhari",
        ]

    def test_list_valid_names(self):
        """Names come back sorted and unique."""
        terms = make_terms() + [Term(name="Immortals", category="unit", faction="Necrons")]
        loader = CandidateLoader(InMemoryCatalog(terms))

        assert loader.list_valid_names("units", "Necrons") == ["Immortals", "Necron Warriors"]

    def test_source_failure_wrapped(self):
        """Source exceptions become recoverable CatalogSourceErrors."""
        loader = CandidateLoader(FailingSource())

        with pytest.raises(CatalogSourceError) as exc_info:
            loader.load_category("units", ["Necrons"])

        assert exc_info.value.recoverable is True
        assert exc_info.value.context["category"] == "unit"
        assert exc_info.value.context["scope"] == "necrons"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    def test_unknown_category(self):
        """Unknown category names are validation errors."""
        loader = CandidateLoader(InMemoryCatalog(make_terms()))

        with pytest.raises(ValidationError):
            loader.load_category("armies")

    def test_invalidate(self):
        """Invalidated entries are fetched again."""
        source = CountingSource(make_terms())
        loader = CandidateLoader(source)
        loader.load_category("units", ["Necrons"])
        loader.load_category("factions")

        assert loader.invalidate("units", ["necrons"]) is True
        loader.load_category("units", ["Necrons"])
        assert loader.invalidate_all() == 2
        assert len(source.calls) == 3


class TestLoadCatalogFile:
    """Tests for load_catalog_file."""

    def test_list_layout(self, tmp_path):
        """A plain list of rows loads."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([
            {"name": "Necrons", "category": "faction"},
            {"name": "Immortals", "category": "unit", "faction": "Necrons"},
        ]))

        catalog = load_catalog_file(path)

        assert len(catalog) == 2
        assert catalog.terms[1].faction == "Necrons"

    def test_terms_layout(self, tmp_path):
        """An object with a terms list loads."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"terms": [{"name": "Necrons", "category": "factions"}]}))

        assert load_catalog_file(path).terms[0].category is Category.FACTION

    def test_category_layout(self, tmp_path):
        """An object keyed by category loads."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({
            "units": [{"name": "Immortals", "faction": "Necrons"}],
            "abilities": [{"name": "Deep Strike"}],
        }))

        catalog = load_catalog_file(path)

        assert [(t.name, t.category) for t in catalog.terms] == [
            ("Immortals", Category.UNIT),
            ("Deep Strike", Category.ABILITY),
        ]

    def test_missing_file(self, tmp_path):
        """A missing file is a resource error."""
        with pytest.raises(ResourceError):
            load_catalog_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        """Unparseable files are validation errors."""
        path = tmp_path / "catalog.json"
        path.write_text("[{")

        with pytest.raises(ValidationError):
            load_catalog_file(path)

    @pytest.mark.parametrize(
        "data",
        [
            {"units": "Immortals"},
            {"units": ["Immortals"]},
            {"armies": []},
            [{"category": "unit"}],
            "Necrons",
        ],
    )
    def test_malformed(self, tmp_path, data):
        """Malformed layouts and rows are validation errors."""
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(data))

        with pytest.raises(ValidationError):
            load_catalog_file(path)
