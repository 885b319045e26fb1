"""Disambiguation of terms that match several catalog entries.

"warriors" is both Necron Warriors and Kabalite Warriors. The resolver
re-ranks the matcher chain's candidates with faction hints and nearby
context, and says whether a single answer can be recommended.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from term_resolver.catalog.loader import CandidateLoader
from term_resolver.config import MatchingConfig
from term_resolver.logging import get_logger
from term_resolver.matching.chain import MatcherChain
from term_resolver.models import Category, MatchResult
from term_resolver.text import normalize_text, overlaps

logger = get_logger(__name__)

AMBIGUITY_CATEGORIES: tuple[Category, ...] = (
    Category.UNIT,
    Category.STRATAGEM,
    Category.ABILITY,
    Category.FACTION,
    Category.DETACHMENT,
    Category.ENHANCEMENT,
)

FACTION_HINT = "faction_hint"
CONTEXT = "context"


@dataclass(frozen=True)
class RankedCandidate:
    """A match re-scored for disambiguation.

    Attributes:
        name: Canonical term
        category: Term category
        faction: Owning faction, if any
        confidence: Confidence from the matcher chain
        relevance: Confidence plus boosts, at most 1.0
        boosts: Which boosts applied, for explaining the ranking
        matcher_used: Matcher that produced the confidence
    """

    name: str
    category: Category | None
    faction: str | None
    confidence: float
    relevance: float
    boosts: tuple[str, ...] = ()
    matcher_used: str = ""

    @property
    def hinted(self) -> bool:
        return FACTION_HINT in self.boosts

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "category": self.category.value if self.category else None,
            "faction": self.faction,
            "confidence": round(self.confidence, 4),
            "relevance": round(self.relevance, 2),
            "boosts": list(self.boosts),
            "matcher_used": self.matcher_used,
        }


@dataclass
class Resolution:
    """Outcome of disambiguating one term."""

    term: str
    ambiguous: bool
    candidates: list[RankedCandidate] = field(default_factory=list)
    recommendation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "term": self.term,
            "ambiguous": self.ambiguous,
            "candidates": [c.to_dict() for c in self.candidates],
            "recommendation": self.recommendation,
        }


def rank_candidates(
    term: str,
    matches: Sequence[MatchResult],
    faction_hints: Sequence[str] | None = None,
    context_snippet: str | None = None,
    config: MatchingConfig | None = None,
) -> Resolution:
    """Re-rank matches with faction hints and context.

    Relevance is the match confidence, plus the hint boost when the
    candidate's faction overlaps any hint, plus the context boost when the
    context mentions the faction, capped at 1.0 and rounded to two places.

    A term is ambiguous when two or more candidates reach the ambiguity
    threshold. When the top candidate was hinted, only hinted candidates
    compete: a hint that singles out one strong candidate settles the term.
    A hint that only lifts a weaker candidate settles nothing.

    Args:
        term: Term being resolved
        matches: Candidates from the matcher chain
        faction_hints: Factions the caller expects
        context_snippet: Surrounding text, truncated to the configured length
        config: Boosts and thresholds (defaults if omitted)

    Returns:
        Resolution with candidates ordered by relevance, then confidence,
        then number of boosts
    """
    config = config or MatchingConfig()
    hints = [h for h in (faction_hints or []) if normalize_text(h)]
    context = normalize_text((context_snippet or "")[: config.max_context_chars])

    ranked = []
    for match in matches:
        boosts: list[str] = []
        relevance = match.confidence
        if match.faction:
            if any(overlaps(match.faction, hint) for hint in hints):
                relevance += config.faction_hint_boost
                boosts.append(FACTION_HINT)
            faction_key = normalize_text(match.faction)
            if context and faction_key and faction_key in context:
                relevance += config.context_boost
                boosts.append(CONTEXT)

        ranked.append(
            RankedCandidate(
                name=match.term,
                category=match.category,
                faction=match.faction,
                confidence=match.confidence,
                relevance=round(min(1.0, relevance), 2),
                boosts=tuple(boosts),
                matcher_used=match.matcher_used,
            )
        )

    # Relevance caps at 1.0, so boosts also break ties
    ranked.sort(key=lambda c: (-c.relevance, -c.confidence, -len(c.boosts), c.name))

    # Hinted candidates compete alone only while one of them leads
    if ranked and ranked[0].hinted:
        contenders = [c for c in ranked if c.hinted]
    else:
        contenders = ranked
    strong = [c for c in contenders if c.relevance >= config.ambiguity_threshold]

    return Resolution(
        term=term,
        ambiguous=len(strong) >= 2,
        candidates=ranked,
        recommendation=contenders[0].name if contenders else None,
    )


class AmbiguityResolver:
    """Resolves ambiguous terms against the whole catalog.

    Example:
        resolver = AmbiguityResolver(loader, build_matcher_chain())
        resolution = resolver.resolve_ambiguous_term("warriors", ["Necrons"])
    """

    def __init__(
        self,
        loader: CandidateLoader,
        chain: MatcherChain,
        config: MatchingConfig | None = None,
    ):
        self.loader = loader
        self.chain = chain
        self.config = config or MatchingConfig()

    def resolve_ambiguous_term(
        self,
        term: str,
        faction_hints: Sequence[str] | None = None,
        context_snippet: str | None = None,
    ) -> Resolution:
        """Find and rank every plausible reading of a term.

        Candidates come from every faction; hints only re-rank them.

        Args:
            term: Term to resolve
            faction_hints: Factions the caller expects
            context_snippet: Surrounding text

        Returns:
            Resolution for the term
        """
        candidates = self.loader.load_candidates(AMBIGUITY_CATEGORIES)
        matches = self.chain.find_best_matches(
            term,
            candidates,
            min_confidence=self.config.ambiguity_min_confidence,
            limit=self.config.ambiguity_limit,
        )
        resolution = rank_candidates(term, matches, faction_hints, context_snippet, self.config)

        logger.debug(
            f"Resolved '{term}'",
            extra={
                "candidates": len(resolution.candidates),
                "ambiguous": resolution.ambiguous,
                "recommendation": resolution.recommendation,
            },
        )
        return resolution
