"""Data models for term-resolver.

This module provides the catalog term model and the match result record.
"""

from __future__ import annotations

from term_resolver.models.match import MatchResult
from term_resolver.models.term import Category, Term

__all__ = [
    "Category",
    "MatchResult",
    "Term",
]
