#!/usr/bin/env python3
"""
Bounded, time-expiring key/value cache for provider lookups.

Eviction is by insertion order (the oldest inserted key goes first), not LRU.
Each resolver receives its own instance, so tests can build isolated caches.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value and the clock reading after which it is stale."""

    key: str
    value: Any
    expires_at: float


class TTLCache:
    """In-memory cache with a fixed capacity and per-entry TTL."""

    def __init__(
        self,
        max_entries: int,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return self.get(key) is not None

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, dropping it first if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            del self._entries[key]
            logger.debug(f"{self.name}: expired {key}")
            return None
        logger.debug(f"{self.name}: hit {key}")
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None):
        """Store a value, evicting the oldest inserted entry when full."""
        if key not in self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"{self.name}: evicted {oldest}")
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = CacheEntry(key, value, self._clock() + ttl)

    def keys(self):
        """Keys in insertion order, including entries that may have expired."""
        return list(self._entries)

    def clear(self):
        self._entries.clear()
