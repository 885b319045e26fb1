"""Time-bounded in-memory cache.

Entries expire lazily: a read compares the entry's age against the TTL
and drops it when stale. Nothing sweeps the cache in the background.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached value and the clock reading when it was stored."""

    data: V
    timestamp: float


class TTLCache(Generic[V]):
    """Thread-safe cache whose entries expire after a fixed lifetime.

    Example:
        cache = TTLCache(ttl_seconds=60)
        cache.set(("unit", "all"), terms)
        cache.get(("unit", "all"))  # terms, or None after a minute
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime in seconds
            clock: Time source in seconds, injectable for tests
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> V | None:
        """Get a live value.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if missing or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp >= self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.data

    def set(self, key: Hashable, data: V) -> None:
        """Store a value, replacing any existing entry."""
        with self._lock:
            self._entries[key] = CacheEntry(data=data, timestamp=self._clock())

    def invalidate(self, key: Hashable) -> bool:
        """Drop one entry.

        Returns:
            True if the key was cached
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_all(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries dropped
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def __len__(self) -> int:
        """Number of stored entries, including ones not yet found stale."""
        with self._lock:
            return len(self._entries)
