"""Vocabulary handling for noisy term resolution.

This module provides phonetic encoding, the phonetic index, curated
overrides and aliases, caption scanning and keyword segmentation.
"""

from __future__ import annotations

from term_resolver.vocabulary.aliases import BUILTIN_ALIASES, get_builtin_aliases, resolve_alias
from term_resolver.vocabulary.index import (
    PhoneticIndex,
    PhoneticIndexCache,
    build_phonetic_index,
    find_best_phonetic_match,
    find_phonetic_matches,
)
from term_resolver.vocabulary.overrides import OverrideDictionary, get_default_overrides
from term_resolver.vocabulary.phonetic import (
    PhoneticCode,
    are_phonetically_similar,
    get_phonetic_code,
    metaphone,
    phonetic_similarity,
    soundex,
)
from term_resolver.vocabulary.scanning import PhoneticScanner, ScanMatch, extract_ngrams
from term_resolver.vocabulary.segmentation import PeeledName, peel_keywords, split_concatenated

__all__ = [
    "BUILTIN_ALIASES",
    "OverrideDictionary",
    "PeeledName",
    "PhoneticCode",
    "PhoneticIndex",
    "PhoneticIndexCache",
    "PhoneticScanner",
    "ScanMatch",
    "are_phonetically_similar",
    "build_phonetic_index",
    "extract_ngrams",
    "find_best_phonetic_match",
    "find_phonetic_matches",
    "get_builtin_aliases",
    "get_default_overrides",
    "get_phonetic_code",
    "metaphone",
    "peel_keywords",
    "phonetic_similarity",
    "resolve_alias",
    "soundex",
    "split_concatenated",
]
