"""Tests for ambiguity resolution."""

import pytest

from term_resolver.catalog import CandidateLoader, InMemoryCatalog
from term_resolver.config import MatchingConfig
from term_resolver.matching import build_matcher_chain
from term_resolver.models import Category, MatchResult, Term
from term_resolver.resolution import AmbiguityResolver, rank_candidates


def warriors_matches():
    return [
        MatchResult(
            term="Necron Warriors",
            confidence=0.8,
            matcher_used="fuzzy",
            category=Category.UNIT,
            faction="Necrons",
        ),
        MatchResult(
            term="Kabalite Warriors",
            confidence=0.78,
            matcher_used="fuzzy",
            category=Category.UNIT,
            faction="Drukhari",
        ),
    ]


class TestRankCandidates:
    """Tests for rank_candidates."""

    def test_hint_settles_term(self):
        """A hint that singles out one strong candidate resolves the term."""
        resolution = rank_candidates("warriors", warriors_matches(), faction_hints=["Necrons"])

        assert resolution.ambiguous is False
        assert resolution.recommendation == "Necron Warriors"
        top = resolution.candidates[0]
        assert top.relevance == pytest.approx(1.0)
        assert top.boosts == ("faction_hint",)
        assert resolution.candidates[1].relevance == pytest.approx(0.78)

    def test_hint_on_weaker_candidate_settles_nothing(self):
        """A tie between unhinted candidates stays ambiguous when a hint lifts a third."""
        matches = [
            MatchResult(term="Necron Warriors", confidence=0.95, matcher_used="fuzzy",
                        category=Category.UNIT, faction="Necrons"),
            MatchResult(term="Kabalite Warriors", confidence=0.95, matcher_used="fuzzy",
                        category=Category.UNIT, faction="Drukhari"),
            MatchResult(term="Guardian Warriors", confidence=0.6, matcher_used="fuzzy",
                        category=Category.UNIT, faction="Aeldari"),
        ]

        resolution = rank_candidates("warriors", matches, faction_hints=["Aeldari"])

        assert resolution.ambiguous is True
        assert resolution.recommendation == resolution.candidates[0].name
        guardian = resolution.candidates[2]
        assert guardian.name == "Guardian Warriors"
        assert guardian.hinted
        assert guardian.relevance == pytest.approx(0.8)

    def test_relevance_rounded_before_threshold(self):
        """Relevance is rounded to two places before it is compared."""
        matches = [
            MatchResult(term="Necron Warriors", confidence=0.8, matcher_used="fuzzy"),
            MatchResult(term="Kabalite Warriors", confidence=0.696, matcher_used="fuzzy"),
        ]

        resolution = rank_candidates("warriors", matches)

        assert resolution.candidates[1].relevance == 0.7
        assert resolution.ambiguous is True

    def test_ambiguous_without_hints(self):
        """Two strong candidates and no hint leave the term ambiguous."""
        resolution = rank_candidates("warriors", warriors_matches())

        assert resolution.ambiguous is True
        assert resolution.recommendation == "Necron Warriors"
        assert [c.name for c in resolution.candidates] == ["Necron Warriors", "Kabalite Warriors"]

    def test_hint_matching_both_stays_ambiguous(self):
        """A hint that boosts several strong candidates doesn't settle anything."""
        matches = warriors_matches()
        resolution = rank_candidates("warriors", matches, faction_hints=["Necrons", "Drukhari"])

        assert resolution.ambiguous is True

    def test_hint_matches_by_overlap(self):
        """Hints match factions by containment, case-insensitively."""
        resolution = rank_candidates("warriors", warriors_matches(), faction_hints=["drukhari kabal"])

        assert resolution.candidates[0].name == "Kabalite Warriors"
        assert resolution.candidates[0].hinted

    def test_context_boost(self):
        """A faction mentioned in context lifts its candidate."""
        resolution = rank_candidates(
            "warriors",
            warriors_matches(),
            context_snippet="Then the Drukhari player moved the warriors up",
        )

        top = resolution.candidates[0]
        assert top.name == "Kabalite Warriors"
        assert top.relevance == pytest.approx(0.93)
        assert top.boosts == ("context",)

    def test_context_truncated(self):
        """Only the first max_context_chars characters are read."""
        config = MatchingConfig(max_context_chars=10)
        resolution = rank_candidates(
            "warriors",
            warriors_matches(),
            context_snippet="x" * 20 + " Drukhari",
            config=config,
        )

        assert all(not c.boosts for c in resolution.candidates)

    def test_relevance_capped(self):
        """Both boosts together never push relevance past 1.0."""
        resolution = rank_candidates(
            "warriors",
            warriors_matches(),
            faction_hints=["Drukhari"],
            context_snippet="drukhari raiders",
        )

        top = resolution.candidates[0]
        assert top.name == "Kabalite Warriors"
        assert top.relevance == 1.0
        assert top.boosts == ("faction_hint", "context")

    def test_weak_candidates_not_ambiguous(self):
        """Candidates below the ambiguity threshold don't compete."""
        matches = [
            MatchResult(term="Necron Warriors", confidence=0.5, matcher_used="phonetic"),
            MatchResult(term="Kabalite Warriors", confidence=0.45, matcher_used="phonetic"),
        ]

        assert rank_candidates("warriors", matches).ambiguous is False

    def test_no_candidates(self):
        """No matches, no recommendation."""
        resolution = rank_candidates("zzz", [])

        assert resolution.ambiguous is False
        assert resolution.recommendation is None
        assert resolution.candidates == []

    def test_to_dict(self):
        """Serialized relevance is rounded to two places."""
        resolution = rank_candidates("warriors", warriors_matches(), faction_hints=["Necrons"])

        data = resolution.to_dict()

        assert data["term"] == "warriors"
        assert data["ambiguous"] is False
        assert data["recommendation"] == "Necron Warriors"
        assert data["candidates"][0]["relevance"] == 1.0
        assert data["candidates"][0]["boosts"] == ["faction_hint"]
        assert data["candidates"][1]["faction"] == "Drukhari"


class TestAmbiguityResolver:
    """Tests for AmbiguityResolver against a catalog."""

    @pytest.fixture
    def resolver(self):
        catalog = InMemoryCatalog([
            Term(name="Lieutenant", category="unit", faction="Space Marines"),
            Term(name="Lieutenant", category="unit", faction="Dark Angels"),
            Term(name="Necron Warriors", category="unit", faction="Necrons"),
            Term(name="Necrons", category="faction"),
            Term(name="Chainsword", category="weapon"),
        ])
        return AmbiguityResolver(CandidateLoader(catalog), build_matcher_chain())

    def test_same_name_in_two_factions(self, resolver):
        """A name shared by two factions is ambiguous without a hint."""
        resolution = resolver.resolve_ambiguous_term("lieutenant")

        assert resolution.ambiguous is True
        assert {c.faction for c in resolution.candidates[:2]} == {"Space Marines", "Dark Angels"}

    def test_hint_picks_faction(self, resolver):
        """A faction hint settles a shared name and ranks its faction first."""
        resolution = resolver.resolve_ambiguous_term("lieutenant", faction_hints=["Dark Angels"])

        assert resolution.ambiguous is False
        assert resolution.recommendation == "Lieutenant"
        assert resolution.candidates[0].faction == "Dark Angels"

    def test_hints_do_not_filter(self, resolver):
        """Hints re-rank candidates but never remove them."""
        resolution = resolver.resolve_ambiguous_term("lieutenant", faction_hints=["Necrons"])

        assert len([c for c in resolution.candidates if c.name == "Lieutenant"]) == 2

    def test_weapons_not_searched(self, resolver):
        """Weapons are outside the disambiguation categories."""
        resolution = resolver.resolve_ambiguous_term("chainsword")

        assert resolution.candidates == []
        assert resolution.recommendation is None

    def test_override(self, resolver):
        """Curated mishearings resolve through the chain."""
        resolution = resolver.resolve_ambiguous_term("neck runs")

        assert resolution.recommendation == "Necrons"
        assert resolution.candidates[0].matcher_used == "override"
