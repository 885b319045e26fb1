"""Matcher chain for term resolution.

This module provides the alias, exact, fuzzy and phonetic matchers and
the chain that merges them into one ranked result list.
"""

from __future__ import annotations

from term_resolver.matching.chain import MatcherChain, build_matcher_chain, find_best_matches
from term_resolver.matching.matchers import (
    AliasMatcher,
    ExactMatcher,
    FuzzyMatcher,
    PhoneticMatcher,
    TermMatcher,
    fuzzy_similarity,
)

__all__ = [
    "AliasMatcher",
    "ExactMatcher",
    "FuzzyMatcher",
    "MatcherChain",
    "PhoneticMatcher",
    "TermMatcher",
    "build_matcher_chain",
    "find_best_matches",
    "fuzzy_similarity",
]
