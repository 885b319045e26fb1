"""Combining matchers into one ranked answer per token."""

from __future__ import annotations

from typing import Mapping, Sequence

from term_resolver.config import MatchingConfig
from term_resolver.matching.matchers import (
    DETERMINISTIC_CONFIDENCE,
    OVERRIDE_PRIORITY,
    AliasMatcher,
    ExactMatcher,
    FuzzyMatcher,
    PhoneticMatcher,
    TermMatcher,
    clamp_confidence,
)
from term_resolver.models import MatchResult, Term
from term_resolver.text import normalize_text
from term_resolver.vocabulary.index import PhoneticIndex
from term_resolver.vocabulary.overrides import OverrideDictionary, get_default_overrides


class MatcherChain:
    """Runs matchers in priority order and merges their results.

    The override table is consulted before any matcher. Results for the
    same term ``(name, category, faction)`` are merged keeping the highest
    confidence; ties go to the higher-priority matcher.

    Example:
        chain = build_matcher_chain()
        chain.find_best_matches("crons", candidates)
    """

    def __init__(
        self,
        matchers: Sequence[TermMatcher],
        overrides: OverrideDictionary | None = None,
        good_enough_confidence: float = 0.9,
    ):
        """Initialize the chain.

        Args:
            matchers: Matching strategies, in any order
            overrides: Curated mishearings checked first (none if omitted)
            good_enough_confidence: ``find_best_match`` stops at the first
                matcher reaching this confidence
        """
        self.matchers = sorted(matchers, key=lambda m: -m.priority)
        self.overrides = overrides if overrides is not None else OverrideDictionary()
        self.good_enough_confidence = clamp_confidence(good_enough_confidence)

    def check_override(self, token: str, candidates: Sequence[Term]) -> list[MatchResult]:
        """Resolve a token through the override table.

        Returns:
            Candidates named by the override, empty if there is no override
            or the vocabulary lacks its canonical term
        """
        canonical = self.overrides.lookup(token)
        if canonical is None:
            return []
        key = normalize_text(canonical)
        return [
            MatchResult.for_term(term, DETERMINISTIC_CONFIDENCE, "override")
            for term in candidates
            if normalize_text(term.name) == key
        ]

    def find_best_matches(
        self,
        token: str,
        candidates: Sequence[Term],
        min_confidence: float = 0.6,
        limit: int = 5,
        check_aliases: bool = True,
    ) -> list[MatchResult]:
        """Rank every candidate any matcher accepts.

        Args:
            token: Text to resolve
            candidates: Catalog terms to match against
            min_confidence: Minimum confidence, clamped into [0, 1]
            limit: Maximum results; zero or less means unbounded
            check_aliases: Whether to consult the alias table

        Returns:
            Matches ordered by confidence, matcher priority, then name
        """
        if not token or not token.strip() or not candidates:
            return []

        min_confidence = clamp_confidence(min_confidence)
        best: dict[tuple, tuple[MatchResult, int]] = {}

        def collect(results: list[MatchResult], priority: int) -> None:
            for result in results:
                if result.confidence < min_confidence:
                    continue
                current = best.get(result.key)
                if current is None or result.confidence > current[0].confidence:
                    best[result.key] = (result, priority)

        collect(self.check_override(token, candidates), OVERRIDE_PRIORITY)
        for matcher in self.matchers:
            if not check_aliases and isinstance(matcher, AliasMatcher):
                continue
            collect(matcher.match_all(token, candidates, min_confidence), matcher.priority)

        ranked = sorted(
            best.values(),
            key=lambda entry: (
                -entry[0].confidence,
                -entry[1],
                entry[0].term,
                entry[0].category.value if entry[0].category else "",
                entry[0].faction or "",
            ),
        )
        results = [result for result, _ in ranked]
        if limit > 0:
            results = results[:limit]
        return results

    def find_best_match(
        self,
        token: str,
        candidates: Sequence[Term],
        min_confidence: float = 0.6,
    ) -> MatchResult | None:
        """Find the single best candidate.

        Tries matchers in priority order and returns as soon as one
        reaches the good-enough bar, otherwise the best result seen.

        Args:
            token: Text to resolve
            candidates: Catalog terms to match against
            min_confidence: Minimum confidence, clamped into [0, 1]

        Returns:
            Best match, or None
        """
        if not token or not token.strip() or not candidates:
            return None

        min_confidence = clamp_confidence(min_confidence)
        overridden = self.check_override(token, candidates)
        if overridden:
            return overridden[0]

        best: MatchResult | None = None
        for matcher in self.matchers:
            result = matcher.match(token, candidates, min_confidence)
            if result is None or result.confidence < min_confidence:
                continue
            if result.confidence >= self.good_enough_confidence:
                return result
            if best is None or result.confidence > best.confidence:
                best = result
        return best


def build_matcher_chain(
    config: MatchingConfig | None = None,
    aliases: Mapping[str, str] | None = None,
    overrides: OverrideDictionary | None = None,
    index: PhoneticIndex | None = None,
) -> MatcherChain:
    """Assemble the standard alias, exact, fuzzy and phonetic chain.

    Args:
        config: Thresholds (defaults if omitted)
        aliases: Alias table (built-ins if omitted)
        overrides: Override table (curated defaults if omitted)
        index: Prebuilt phonetic index for a fixed vocabulary

    Returns:
        Configured MatcherChain
    """
    config = config or MatchingConfig()
    return MatcherChain(
        matchers=[
            AliasMatcher(aliases),
            ExactMatcher(),
            FuzzyMatcher(config.fuzzy_threshold),
            PhoneticMatcher(config.phonetic_threshold, index=index),
        ],
        overrides=get_default_overrides() if overrides is None else overrides,
        good_enough_confidence=config.good_enough_confidence,
    )


def find_best_matches(
    token: str,
    candidates: Sequence[Term],
    min_confidence: float = 0.6,
    limit: int = 5,
    check_aliases: bool = True,
    chain: MatcherChain | None = None,
) -> list[MatchResult]:
    """Rank candidates for a token with the standard chain.

    Builds a default chain when none is given; long-lived callers should
    build one chain and pass it in.
    """
    chain = chain or build_matcher_chain()
    return chain.find_best_matches(
        token,
        candidates,
        min_confidence=min_confidence,
        limit=limit,
        check_aliases=check_aliases,
    )
