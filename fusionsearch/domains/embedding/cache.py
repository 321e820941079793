"""
Embedding Cache - Bounded in-memory LRU cache with TTL.

Avoids repeated provider calls for text embedded within the last day.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable

import numpy as np

from .models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

__all__ = ["EmbeddingCache"]


class EmbeddingCache:
    """
    LRU embedding cache with TTL.

    Features:
    - Lazy TTL expiration on read
    - Least-recently-used eviction at capacity
    - Read-only stored vectors so callers cannot corrupt entries
    - Hit/miss tracking for operational visibility
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            max_size: Maximum number of cached entries
            ttl_seconds: Entry lifetime in seconds
            clock: Time source
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self._cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_size = max_size
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    @staticmethod
    def make_key(text: str) -> str:
        """Generate cache key from normalized text and its length."""
        normalized = text.strip().lower()
        return hashlib.sha256(f"{len(normalized)}:{normalized}".encode()).hexdigest()

    def get(self, text: str) -> np.ndarray | None:
        """Get cached vector if present and not expired."""
        key = self.make_key(text)

        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            if self._clock() - entry.inserted_at > self._ttl_seconds:
                del self._cache[key]
                self._expirations += 1
                self._misses += 1
                logger.debug("Cache entry expired: %s", key[:16])
                return None

            self._cache.move_to_end(key)
            self._hits += 1

        logger.debug("Cache hit: %s", key[:16])
        return entry.vector

    def put(self, text: str, vector: np.ndarray) -> np.ndarray:
        """
        Cache a vector.

        Returns:
            The stored read-only copy
        """
        key = self.make_key(text)
        stored = np.array(vector, dtype=np.float32, copy=True)
        stored.flags.writeable = False

        with self._lock:
            if key in self._cache:
                del self._cache[key]
            elif len(self._cache) >= self._max_size:
                evicted, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted least recently used entry: %s", evicted[:16])

            self._cache[key] = CacheEntry(key=key, vector=stored, inserted_at=self._clock())

        return stored

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info("Cleared %d cache entries", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            return CacheStats(
                size=len(self._cache),
                max_size=self._max_size,
                ttl_seconds=self._ttl_seconds,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
            )
