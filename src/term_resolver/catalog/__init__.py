"""Catalog access for term resolution.

This module provides the candidate source protocol, an in-memory catalog,
the caching candidate loader and the TTL cache behind it.
"""

from __future__ import annotations

from term_resolver.catalog.cache import CacheEntry, TTLCache
from term_resolver.catalog.loader import (
    CandidateLoader,
    CandidateSource,
    InMemoryCatalog,
    faction_scope,
    load_catalog_file,
)

__all__ = [
    "CacheEntry",
    "CandidateLoader",
    "CandidateSource",
    "InMemoryCatalog",
    "TTLCache",
    "faction_scope",
    "load_catalog_file",
]
