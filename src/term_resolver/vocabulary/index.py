"""Phonetic index over a fixed vocabulary.

An index holds four inverted maps, one per fingerprint type, from code to
the term names sharing it. It is built once per vocabulary snapshot and
never updated in place; a changed vocabulary means a new index.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence, Union

from term_resolver.logging import get_logger
from term_resolver.models import MatchResult, Term
from term_resolver.vocabulary.overrides import OverrideDictionary, get_default_overrides
from term_resolver.vocabulary.phonetic import get_phonetic_code, phonetic_similarity

logger = get_logger(__name__)

TermLike = Union[str, Term]

# Base weight of a bucket hit, strongest fingerprint first
DM_PRIMARY_WEIGHT = 0.9
DM_SECONDARY_WEIGHT = 0.7
METAPHONE_WEIGHT = 0.6
SOUNDEX_WEIGHT = 0.4

OVERRIDE_CONFIDENCE = 1.0


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def _term_name(term: TermLike) -> str:
    return term.name if isinstance(term, Term) else term


@dataclass(frozen=True)
class PhoneticIndex:
    """Inverted fingerprint maps for one vocabulary snapshot.

    Bucket order is insertion order, so identical vocabularies produce
    identical lookups.
    """

    metaphone: Mapping[str, tuple[str, ...]]
    soundex: Mapping[str, tuple[str, ...]]
    double_metaphone_primary: Mapping[str, tuple[str, ...]]
    double_metaphone_secondary: Mapping[str, tuple[str, ...]]
    terms: tuple[str, ...]
    _by_lower: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    def find_term(self, name: str) -> str | None:
        """Return the indexed spelling of a name, matched case-insensitively."""
        return self._by_lower.get(name.strip().lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find_term(name) is not None

    def __len__(self) -> int:
        return len(self.terms)


def build_phonetic_index(terms: Iterable[TermLike]) -> PhoneticIndex:
    """Build a phonetic index for a vocabulary.

    Each term is added to every bucket whose key is non-empty. The Double
    Metaphone secondary bucket only gets the term when its secondary code
    differs from the primary. Duplicate names are indexed once.

    Args:
        terms: Term names or Term records

    Returns:
        New PhoneticIndex
    """
    metaphone_map: dict[str, list[str]] = {}
    soundex_map: dict[str, list[str]] = {}
    primary_map: dict[str, list[str]] = {}
    secondary_map: dict[str, list[str]] = {}
    names: list[str] = []
    seen: set[str] = set()
    by_lower: dict[str, str] = {}

    for term in terms:
        name = _term_name(term)
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
        by_lower.setdefault(name.strip().lower(), name)

        code = get_phonetic_code(name)
        if code.metaphone:
            metaphone_map.setdefault(code.metaphone, []).append(name)
        if code.soundex:
            soundex_map.setdefault(code.soundex, []).append(name)
        if code.double_metaphone_primary:
            primary_map.setdefault(code.double_metaphone_primary, []).append(name)
        if (
            code.double_metaphone_secondary
            and code.double_metaphone_secondary != code.double_metaphone_primary
        ):
            secondary_map.setdefault(code.double_metaphone_secondary, []).append(name)

    def freeze(buckets: dict[str, list[str]]) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType({k: tuple(v) for k, v in buckets.items()})

    logger.debug(
        f"Built phonetic index for {len(names)} terms",
        extra={"primary_buckets": len(primary_map), "soundex_buckets": len(soundex_map)},
    )

    return PhoneticIndex(
        metaphone=freeze(metaphone_map),
        soundex=freeze(soundex_map),
        double_metaphone_primary=freeze(primary_map),
        double_metaphone_secondary=freeze(secondary_map),
        terms=tuple(names),
        _by_lower=MappingProxyType(by_lower),
    )


def find_phonetic_matches(
    input: str,
    index: PhoneticIndex,
    max_results: int = 5,
    min_confidence: float = 0.4,
    overrides: OverrideDictionary | None = None,
) -> list[MatchResult]:
    """Find indexed terms that sound like the input.

    An override hit whose canonical term is in the index wins outright
    with confidence 1.0. Otherwise every term sharing any of the input's
    fingerprints is rescored as ``(bucket weight + similarity) / 2``.

    Args:
        input: Word or phrase to match
        index: Index built from the vocabulary to search
        max_results: Maximum results; zero or less means unbounded
        min_confidence: Minimum confidence, clamped into [0, 1]
        overrides: Override table (the curated defaults if omitted)

    Returns:
        Matches sorted by confidence descending, then name
    """
    if not input or not input.strip():
        return []

    min_confidence = _clamp(min_confidence)
    overrides = get_default_overrides() if overrides is None else overrides

    canonical = overrides.lookup(input)
    if canonical:
        indexed = index.find_term(canonical)
        if indexed is not None:
            return [MatchResult(term=indexed, confidence=OVERRIDE_CONFIDENCE, matcher_used="override")]

    code = get_phonetic_code(input)
    if code.is_empty:
        return []

    weights: dict[str, float] = {}
    lookups = (
        (index.double_metaphone_primary, code.double_metaphone_primary, DM_PRIMARY_WEIGHT),
        (index.double_metaphone_secondary, code.double_metaphone_secondary, DM_SECONDARY_WEIGHT),
        (index.metaphone, code.metaphone, METAPHONE_WEIGHT),
        (index.soundex, code.soundex, SOUNDEX_WEIGHT),
    )
    for buckets, key, weight in lookups:
        if not key:
            continue
        for name in buckets.get(key, ()):
            weights[name] = max(weights.get(name, 0.0), weight)

    matches = []
    for name, weight in weights.items():
        confidence = (weight + phonetic_similarity(input, name)) / 2
        if confidence >= min_confidence:
            matches.append(MatchResult(term=name, confidence=confidence, matcher_used="phonetic"))

    matches.sort(key=lambda m: (-m.confidence, m.term))
    if max_results > 0:
        matches = matches[:max_results]
    return matches


def find_best_phonetic_match(
    input: str,
    candidates: Iterable[TermLike],
    min_confidence: float = 0.5,
    overrides: OverrideDictionary | None = None,
) -> MatchResult | None:
    """Find the candidate that sounds most like the input, without an index.

    Args:
        input: Word or phrase to match
        candidates: Candidate names or Term records
        min_confidence: Minimum similarity, clamped into [0, 1]
        overrides: Override table (the curated defaults if omitted)

    Returns:
        Best match, or None if nothing reaches min_confidence
    """
    if not input or not input.strip():
        return None

    min_confidence = _clamp(min_confidence)
    overrides = get_default_overrides() if overrides is None else overrides
    candidates = list(candidates)

    canonical = overrides.lookup(input)
    if canonical:
        wanted = canonical.lower()
        for candidate in candidates:
            if _term_name(candidate).strip().lower() == wanted:
                return _result_for(candidate, OVERRIDE_CONFIDENCE, "override")

    best: MatchResult | None = None
    for candidate in candidates:
        similarity = phonetic_similarity(input, _term_name(candidate))
        if similarity >= min_confidence and (best is None or similarity > best.confidence):
            best = _result_for(candidate, similarity, "phonetic")
    return best


def _result_for(candidate: TermLike, confidence: float, matcher_used: str) -> MatchResult:
    if isinstance(candidate, Term):
        return MatchResult.for_term(candidate, confidence, matcher_used)
    return MatchResult(term=candidate, confidence=confidence, matcher_used=matcher_used)


class PhoneticIndexCache:
    """Phonetic indices cached per scope key (e.g. a faction filter).

    An entry is rebuilt whenever the vocabulary handed to ``get_or_build``
    differs from the one it was built from, so an index is never queried
    against another vocabulary. With ``max_entries`` set, the least recently
    used scope is dropped once the cache is full.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self.max_entries = max_entries
        self._entries: OrderedDict[str, tuple[tuple[str, ...], PhoneticIndex]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, scope: str) -> PhoneticIndex | None:
        """Get the cached index for a scope, if any."""
        with self._lock:
            entry = self._entries.get(scope)
        return entry[1] if entry else None

    def get_or_build(self, scope: str, terms: Sequence[TermLike]) -> PhoneticIndex:
        """Get the index for a scope, building it if missing or stale.

        Args:
            scope: Scope key
            terms: Current vocabulary for the scope

        Returns:
            Index built from exactly this vocabulary
        """
        names = tuple(_term_name(t) for t in terms)
        with self._lock:
            entry = self._entries.get(scope)
            if entry is not None and entry[0] == names:
                self._entries.move_to_end(scope)
                return entry[1]

        logger.debug(f"Building phonetic index for scope {scope}", extra={"terms": len(names)})
        index = build_phonetic_index(terms)

        with self._lock:
            self._entries[scope] = (names, index)
            self._entries.move_to_end(scope)
            if self.max_entries is not None:
                while len(self._entries) > max(1, self.max_entries):
                    self._entries.popitem(last=False)
        return index

    def invalidate(self, scope: str) -> bool:
        """Discard the index for one scope.

        Returns:
            True if an index was cached for the scope
        """
        with self._lock:
            return self._entries.pop(scope, None) is not None

    def invalidate_all(self) -> int:
        """Discard every cached index.

        Returns:
            Number of indices discarded
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
