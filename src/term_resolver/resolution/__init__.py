"""Ambiguity resolution.

This module provides context-aware re-ranking of candidates for terms
that match more than one catalog entry.
"""

from __future__ import annotations

from term_resolver.resolution.ambiguity import (
    AMBIGUITY_CATEGORIES,
    AmbiguityResolver,
    RankedCandidate,
    Resolution,
    rank_candidates,
)

__all__ = [
    "AMBIGUITY_CATEGORIES",
    "AmbiguityResolver",
    "RankedCandidate",
    "Resolution",
    "rank_candidates",
]
