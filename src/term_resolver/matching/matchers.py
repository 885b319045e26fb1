"""Independent matching strategies.

Each matcher maps a token to zero or more catalog terms with a confidence.
Matchers know nothing about each other; ``MatcherChain`` combines them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from term_resolver.models import MatchResult, Term
from term_resolver.text import compact_text, normalize_text
from term_resolver.vocabulary.aliases import BUILTIN_ALIASES, resolve_alias
from term_resolver.vocabulary.index import PhoneticIndex, PhoneticIndexCache, find_phonetic_matches
from term_resolver.vocabulary.overrides import OverrideDictionary

OVERRIDE_PRIORITY = 110
ALIAS_PRIORITY = 100
EXACT_PRIORITY = 90
FUZZY_PRIORITY = 60
PHONETIC_PRIORITY = 50

# Indices kept for recently seen candidate lists
PHONETIC_INDEX_CACHE_SIZE = 16

DETERMINISTIC_CONFIDENCE = 1.0
# Only alias, override and exact hits may claim certainty
FUZZY_CEILING = 0.99


def clamp_confidence(value: float) -> float:
    """Clamp a confidence or threshold into [0, 1]."""
    return min(1.0, max(0.0, value))


def sort_results(results: list[MatchResult]) -> list[MatchResult]:
    """Sort by confidence descending, then term name."""
    return sorted(results, key=lambda r: (-r.confidence, r.term))


def _terms_named(name: str, candidates: Sequence[Term]) -> list[Term]:
    key = normalize_text(name)
    if not key:
        return []
    return [t for t in candidates if normalize_text(t.name) == key]


class TermMatcher(ABC):
    """Abstract base class for matching strategies.

    Every matcher returns confidences in [0, 1] and never raises on odd
    input: an empty or unmatchable token gives no results.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the matcher name, reported as ``matcher_used``."""
        pass

    @property
    @abstractmethod
    def priority(self) -> int:
        """Return the tie-breaking priority; higher runs first."""
        pass

    @abstractmethod
    def match_all(
        self,
        token: str,
        candidates: Sequence[Term],
        min_confidence: float = 0.0,
    ) -> list[MatchResult]:
        """Find every candidate this strategy matches.

        Args:
            token: Text to resolve
            candidates: Catalog terms to match against
            min_confidence: Drop results below this confidence

        Returns:
            Matches sorted by confidence descending
        """
        pass

    def match(
        self,
        token: str,
        candidates: Sequence[Term],
        min_confidence: float = 0.0,
    ) -> MatchResult | None:
        """Find the single best candidate, or None."""
        results = self.match_all(token, candidates, min_confidence)
        return results[0] if results else None


class AliasMatcher(TermMatcher):
    """Looks the token up in a curated table of colloquial names."""

    def __init__(self, aliases: Mapping[str, str] | None = None):
        """Initialize the matcher.

        Args:
            aliases: Normalized alias -> canonical name (built-ins if omitted)
        """
        self.aliases = BUILTIN_ALIASES if aliases is None else aliases

    @property
    def name(self) -> str:
        return "alias"

    @property
    def priority(self) -> int:
        return ALIAS_PRIORITY

    def match_all(self, token, candidates, min_confidence=0.0):
        canonical = resolve_alias(token, self.aliases)
        if canonical is None:
            return []
        # The canonical term only counts if this vocabulary has it
        return [
            MatchResult.for_term(term, DETERMINISTIC_CONFIDENCE, self.name)
            for term in _terms_named(canonical, candidates)
        ]


class ExactMatcher(TermMatcher):
    """Case, punctuation and whitespace insensitive equality."""

    @property
    def name(self) -> str:
        return "exact"

    @property
    def priority(self) -> int:
        return EXACT_PRIORITY

    def match_all(self, token, candidates, min_confidence=0.0):
        return [
            MatchResult.for_term(term, DETERMINISTIC_CONFIDENCE, self.name)
            for term in _terms_named(token, candidates)
        ]


def fuzzy_similarity(a: str, b: str) -> float:
    """Edit-distance similarity of two names in [0, 1].

    Compares the names with separators removed, so "Deep Strike" and
    "deepstrike" are identical. Multi-word names are also compared with
    their words sorted, which forgives reordering ("Warriors Necron").
    """
    compact_a, compact_b = compact_text(a), compact_text(b)
    if not compact_a or not compact_b:
        return 0.0
    if compact_a == compact_b:
        return 1.0

    score = Levenshtein.normalized_similarity(compact_a, compact_b)

    words_a, words_b = normalize_text(a), normalize_text(b)
    if " " in words_a and " " in words_b:
        score = max(score, fuzz.token_sort_ratio(words_a, words_b) / 100.0)

    return score


class FuzzyMatcher(TermMatcher):
    """Normalized edit-distance matching against candidate names."""

    def __init__(self, threshold: float = 0.7):
        """Initialize the matcher.

        Args:
            threshold: Minimum similarity to report a match
        """
        self.threshold = clamp_confidence(threshold)

    @property
    def name(self) -> str:
        return "fuzzy"

    @property
    def priority(self) -> int:
        return FUZZY_PRIORITY

    def match_all(self, token, candidates, min_confidence=0.0):
        if not compact_text(token):
            return []

        floor = max(self.threshold, clamp_confidence(min_confidence))
        results = []
        for term in candidates:
            confidence = min(fuzzy_similarity(token, term.name), FUZZY_CEILING)
            if confidence >= floor:
                results.append(MatchResult.for_term(term, confidence, self.name))
        return sort_results(results)


class PhoneticMatcher(TermMatcher):
    """Sound-alike matching through a phonetic index.

    Without an injected index, one is built per distinct candidate list
    and reused whenever the same list is passed in again. Only the most
    recently used lists keep their index.
    """

    def __init__(
        self,
        threshold: float = 0.5,
        index: PhoneticIndex | None = None,
        overrides: OverrideDictionary | None = None,
    ):
        """Initialize the matcher.

        Args:
            threshold: Minimum blended confidence to report a match
            index: Prebuilt index of the candidate vocabulary
            overrides: Override table consulted by the index lookup; empty
                by default because the chain checks overrides itself
        """
        self.threshold = clamp_confidence(threshold)
        self.index = index
        self.overrides = overrides if overrides is not None else OverrideDictionary()
        self._indices = PhoneticIndexCache(max_entries=PHONETIC_INDEX_CACHE_SIZE)

    @property
    def name(self) -> str:
        return "phonetic"

    @property
    def priority(self) -> int:
        return PHONETIC_PRIORITY

    def _index_for(self, candidates: Sequence[Term]) -> PhoneticIndex:
        if self.index is not None:
            return self.index
        names = tuple(t.name for t in candidates)
        return self._indices.get_or_build(f"candidates:{hash(names)}", candidates)

    def clear_cache(self) -> int:
        """Discard indices built from earlier candidate lists."""
        return self._indices.invalidate_all()

    def match_all(self, token, candidates, min_confidence=0.0):
        if not token or not token.strip() or not candidates:
            return []

        by_name: dict[str, list[Term]] = {}
        for term in candidates:
            by_name.setdefault(term.name, []).append(term)

        found = find_phonetic_matches(
            token,
            self._index_for(candidates),
            max_results=0,
            min_confidence=max(self.threshold, clamp_confidence(min_confidence)),
            overrides=self.overrides,
        )

        results = []
        for hit in found:
            for term in by_name.get(hit.term, ()):
                results.append(MatchResult.for_term(term, hit.confidence, hit.matcher_used))
        return sort_results(results)
