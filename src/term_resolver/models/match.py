"""Match result model shared by every matcher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from term_resolver.models.term import Category, Term


@dataclass(frozen=True)
class MatchResult:
    """A candidate canonical term for some input token.

    Confidence is in [0, 1]; 1.0 only for alias, override and exact hits.
    """

    term: str
    confidence: float
    matcher_used: str
    category: Category | None = None
    faction: str | None = None

    @classmethod
    def for_term(cls, term: Term, confidence: float, matcher_used: str) -> "MatchResult":
        """Build a result carrying a catalog term's category and faction."""
        return cls(
            term=term.name,
            confidence=confidence,
            matcher_used=matcher_used,
            category=term.category,
            faction=term.faction,
        )

    @property
    def key(self) -> tuple[str, Category | None, str | None]:
        """Identity used when merging results from several matchers."""
        return (self.term, self.category, self.faction)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "term": self.term,
            "category": self.category.value if self.category else None,
            "faction": self.faction,
            "confidence": round(self.confidence, 4),
            "matcher_used": self.matcher_used,
        }
