"""Validation service: the operations callers invoke.

Bundles the candidate loader, the matcher chain, the ambiguity resolver
and the phonetic index cache behind batch validation, autocomplete search,
name listing and disambiguation. Build one service at startup and pass it
to whatever serves requests.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from term_resolver.catalog.loader import CandidateLoader, faction_scope
from term_resolver.config import MatchingConfig
from term_resolver.logging import get_logger, log_operation_complete
from term_resolver.matching.chain import MatcherChain, build_matcher_chain
from term_resolver.matching.matchers import PhoneticMatcher
from term_resolver.models import Category, MatchResult
from term_resolver.resolution.ambiguity import AmbiguityResolver, Resolution
from term_resolver.text import normalize_text
from term_resolver.vocabulary.aliases import BUILTIN_ALIASES
from term_resolver.vocabulary.index import PhoneticIndex, PhoneticIndexCache
from term_resolver.vocabulary.overrides import OverrideDictionary
from term_resolver.vocabulary.scanning import PhoneticScanner

logger = get_logger(__name__)

VALIDATE_CATEGORIES: tuple[Category, ...] = (
    Category.UNIT,
    Category.STRATAGEM,
    Category.ABILITY,
    Category.FACTION,
    Category.ENHANCEMENT,
    Category.KEYWORD,
)

SEARCH_CATEGORIES: tuple[Category, ...] = (
    Category.UNIT,
    Category.STRATAGEM,
    Category.ABILITY,
    Category.FACTION,
    Category.DETACHMENT,
    Category.ENHANCEMENT,
    Category.KEYWORD,
)


@dataclass
class TermValidation:
    """Validation outcome for one input term."""

    input: str
    match: str | None = None
    category: Category | None = None
    faction: str | None = None
    confidence: float = 0.0
    alternates: list[MatchResult] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.match is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "input": self.input,
            "match": self.match,
            "category": self.category.value if self.category else None,
            "faction": self.faction,
            "confidence": round(self.confidence, 2),
            "alternates": [
                {"name": m.term, "confidence": round(m.confidence, 2)} for m in self.alternates
            ],
        }


@dataclass
class ValidationReport:
    """Validation outcome for a batch of terms."""

    results: list[TermValidation] = field(default_factory=list)
    truncated: bool = False

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def matched(self) -> int:
        return sum(1 for r in self.results if r.matched)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "results": [r.to_dict() for r in self.results],
            "processed": self.processed,
            "matched": self.matched,
            "truncated": self.truncated,
        }


@dataclass
class SearchResult:
    """Autocomplete matches for one query."""

    query: str
    matches: list[MatchResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"query": self.query, "matches": [m.to_dict() for m in self.matches]}


@dataclass
class NameListing:
    """Valid names of one category, optionally with their aliases."""

    category: Category
    faction: str | None
    names: list[str] = field(default_factory=list)
    aliases: dict[str, str] | None = None

    @property
    def count(self) -> int:
        return len(self.names)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "category": self.category.value,
            "faction": self.faction,
            "names": self.names,
            "count": self.count,
        }
        if self.aliases is not None:
            data["aliases"] = self.aliases
        return data


def _parse_categories(
    categories: Iterable[Category | str] | None,
    default: tuple[Category, ...],
) -> list[Category]:
    if not categories:
        return list(default)
    parsed: list[Category] = []
    for category in categories:
        value = Category.parse(category)
        if value not in parsed:
            parsed.append(value)
    return parsed


class TermValidationService:
    """Term validation, search and disambiguation over a candidate loader.

    Example:
        service = TermValidationService(CandidateLoader(load_catalog_file(path)))
        report = service.validate_terms(["neck runs", "crons"])
    """

    def __init__(
        self,
        loader: CandidateLoader,
        config: MatchingConfig | None = None,
        chain: MatcherChain | None = None,
        aliases: Mapping[str, str] | None = None,
        overrides: OverrideDictionary | None = None,
        index_cache: PhoneticIndexCache | None = None,
    ):
        """Initialize the service.

        Args:
            loader: Candidate loader over the catalog
            config: Thresholds and limits (defaults if omitted)
            chain: Matcher chain (the standard chain if omitted)
            aliases: Alias table (built-ins if omitted)
            overrides: Override table (curated defaults if omitted)
            index_cache: Cache for scoped phonetic indices
        """
        self.loader = loader
        self.config = config or MatchingConfig()
        self.aliases = BUILTIN_ALIASES if aliases is None else aliases
        self.chain = chain or build_matcher_chain(self.config, self.aliases, overrides)
        self.index_cache = index_cache if index_cache is not None else PhoneticIndexCache()
        self.resolver = AmbiguityResolver(loader, self.chain, self.config)

    def validate_terms(
        self,
        terms: Sequence[str],
        factions: Sequence[str] | None = None,
        categories: Iterable[Category | str] | None = None,
        min_confidence: float | None = None,
    ) -> ValidationReport:
        """Check each term against the catalog.

        At most the configured batch size is processed; the rest are
        dropped and the report is marked truncated.

        Args:
            terms: Terms to validate
            factions: Limit faction-scoped categories to these factions
            categories: Categories to search (units, stratagems, abilities,
                factions, enhancements and keywords if omitted)
            min_confidence: Minimum confidence for a match

        Returns:
            ValidationReport with one entry per processed term
        """
        start = time.perf_counter()
        limit = self.config.max_batch_terms
        batch = list(terms)[:limit]
        truncated = len(terms) > limit
        if truncated:
            logger.warning(
                f"Validating only the first {limit} of {len(terms)} terms",
                extra={"limit": limit},
            )

        min_confidence = (
            self.config.validate_min_confidence if min_confidence is None else min_confidence
        )
        candidates = self.loader.load_candidates(
            _parse_categories(categories, VALIDATE_CATEGORIES),
            factions,
        )

        results = []
        for term in batch:
            matches = self.chain.find_best_matches(
                term,
                candidates,
                min_confidence=min_confidence,
                limit=self.config.validate_limit,
            )
            if not matches:
                results.append(TermValidation(input=term))
                continue
            best = matches[0]
            results.append(
                TermValidation(
                    input=term,
                    match=best.term,
                    category=best.category,
                    faction=best.faction,
                    confidence=best.confidence,
                    alternates=matches[1:],
                )
            )

        report = ValidationReport(results=results, truncated=truncated)
        log_operation_complete(
            logger,
            "validate_terms",
            time.perf_counter() - start,
            processed=report.processed,
            matched=report.matched,
        )
        return report

    def fuzzy_search(
        self,
        query: str,
        categories: Iterable[Category | str] | None = None,
        faction: str | None = None,
        limit: int | None = None,
    ) -> SearchResult:
        """Lenient search for autocomplete.

        Args:
            query: Partial or misspelled name
            categories: Categories to search (all but weapons if omitted)
            faction: Limit faction-scoped categories to this faction
            limit: Maximum results, clamped to the configured range

        Returns:
            SearchResult ordered by confidence
        """
        limit = self.config.default_search_limit if limit is None else limit
        limit = min(max(limit, 1), self.config.max_search_limit)

        candidates = self.loader.load_candidates(
            _parse_categories(categories, SEARCH_CATEGORIES),
            [faction] if faction else None,
        )
        matches = self.chain.find_best_matches(
            query,
            candidates,
            min_confidence=self.config.search_min_confidence,
            limit=limit,
        )
        return SearchResult(query=query, matches=matches)

    def list_valid_names(
        self,
        category: Category | str,
        faction: str | None = None,
        include_aliases: bool = False,
    ) -> NameListing:
        """List the names of one category.

        Args:
            category: Category to list
            faction: Limit to one faction
            include_aliases: Also return aliases that point at listed names

        Returns:
            NameListing with sorted names
        """
        category = Category.parse(category)
        names = self.loader.list_valid_names(category, faction)

        aliases = None
        if include_aliases:
            listed = {normalize_text(n) for n in names}
            aliases = {
                alias: target
                for alias, target in self.aliases.items()
                if normalize_text(target) in listed
            }

        return NameListing(category=category, faction=faction, names=names, aliases=aliases)

    def resolve_ambiguous_term(
        self,
        term: str,
        faction_hints: Sequence[str] | None = None,
        context_snippet: str | None = None,
    ) -> Resolution:
        """Rank every plausible reading of a term; see ``AmbiguityResolver``."""
        return self.resolver.resolve_ambiguous_term(term, faction_hints, context_snippet)

    def phonetic_index_for(
        self,
        categories: Iterable[Category | str],
        faction_filters: Sequence[str] | None = None,
    ) -> PhoneticIndex:
        """Phonetic index of the current candidates for a scope.

        The index is cached per scope and rebuilt when the loaded
        candidates change.
        """
        parsed = _parse_categories(categories, SEARCH_CATEGORIES)
        scope = "|".join(
            f"{c.value}:{faction_scope(c, faction_filters)}"
            for c in sorted(parsed, key=lambda c: c.value)
        )
        candidates = self.loader.load_candidates(parsed, faction_filters)
        return self.index_cache.get_or_build(scope, candidates)

    def scanner_for(
        self,
        categories: Iterable[Category | str] | None = None,
        faction_filters: Sequence[str] | None = None,
        min_confidence: float | None = None,
    ) -> PhoneticScanner:
        """Phonetic caption scanner over a scope's candidates."""
        index = self.phonetic_index_for(categories or SEARCH_CATEGORIES, faction_filters)
        threshold = self.config.phonetic_threshold if min_confidence is None else min_confidence
        return PhoneticScanner(index, min_confidence=threshold, overrides=self.chain.overrides)

    def invalidate(self) -> None:
        """Drop cached candidates and indices after a catalog change."""
        dropped = self.loader.invalidate_all()
        indices = self.index_cache.invalidate_all()
        for matcher in self.chain.matchers:
            if isinstance(matcher, PhoneticMatcher):
                indices += matcher.clear_cache()
        logger.info("Invalidated caches", extra={"candidate_lists": dropped, "indices": indices})
