"""
Bounded in-memory cache with least-recently-used eviction.

Used by the match strategies to keep file hashes, perceptual hashes and
embeddings for files that are compared more than once. Entries are never
persisted; the owning strategy clears the cache after a run.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

from .config import DEFAULT_CACHE_CAPACITY
from .models import CandidateFile

logger = logging.getLogger(__name__)

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')

_MISSING = object()


@dataclass
class CacheStats:
    """Statistics about cache usage."""
    cache_hits: int = 0
    cache_misses: int = 0
    evictions: int = 0

    @property
    def total_lookups(self) -> int:
        return self.cache_hits + self.cache_misses

    @property
    def hit_rate(self) -> float:
        """Return cache hit rate as percentage."""
        if self.total_lookups == 0:
            return 0.0
        return (self.cache_hits / self.total_lookups) * 100


def make_cache_key(file: CandidateFile) -> tuple[str, int, float]:
    """
    Create a cache key from file attributes.

    The key changes if the file is modified or its size changes, so stale
    entries are never returned for a rewritten file.
    """
    return (file.path, file.size, file.modified)


class LRUCache(Generic[K, V]):
    """
    Thread-safe, capacity-bounded key/value cache.

    Every read or write stamps the entry with the next value of a monotonic
    access counter; when an insert would exceed ``capacity`` the entry with
    the oldest stamp is evicted. The map is kept in access order so the
    oldest entry is always at the front.

    ``get_or_compute`` runs the factory outside the lock: two threads missing
    the same key may both compute it, and the last write wins.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY):
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1")
        self._capacity = capacity
        self._entries: OrderedDict[K, tuple[V, int]] = OrderedDict()
        self._clock = itertools.count()
        self._lock = threading.Lock()
        self.stats = CacheStats()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def count(self) -> int:
        """Number of cached entries."""
        return len(self)

    def __contains__(self, key: K) -> bool:
        with self._lock:
            return key in self._entries

    def try_get(self, key: K) -> tuple[bool, Optional[V]]:
        """Return ``(True, value)`` on a hit, ``(False, None)`` on a miss."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            return False, None
        return True, value

    def get(self, key: K, default: Any = None) -> Any:
        """Return the cached value (refreshing its access stamp) or ``default``."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.stats.cache_misses += 1
                return default
            self._entries[key] = (entry[0], next(self._clock))
            self._entries.move_to_end(key)
            self.stats.cache_hits += 1
            return entry[0]

    def put(self, key: K, value: V) -> None:
        """Insert or replace a value, evicting the least recently used entry if full."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            else:
                while len(self._entries) >= self._capacity:
                    evicted, _ = self._entries.popitem(last=False)
                    self.stats.evictions += 1
                    logger.debug(f"Evicted cache entry {evicted!r}")
            self._entries[key] = (value, next(self._clock))

    def get_or_compute(self, key: K, factory: Callable[[K], V]) -> V:
        """
        Return the cached value for ``key``, computing and storing it on a miss.

        Exceptions raised by ``factory`` propagate and nothing is cached.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = factory(key)
        self.put(key, value)
        return value

    def remove(self, key: K) -> bool:
        """Remove ``key``; return True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry and reset statistics."""
        with self._lock:
            self._entries.clear()
            self.stats = CacheStats()

    def oldest_key(self) -> Optional[K]:
        """Key that would be evicted next, or None when empty."""
        with self._lock:
            return next(iter(self._entries), None)

    def access_stamp(self, key: K) -> Optional[int]:
        """Monotonic access stamp of ``key`` (larger is more recent)."""
        with self._lock:
            entry = self._entries.get(key)
            return entry[1] if entry is not None else None


__all__ = ['LRUCache', 'CacheStats', 'make_cache_key']
