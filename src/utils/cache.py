"""
c0rd - Shared Cache Utilities
=============================

TTL-based caching shared by the correlation caches.

DESIGN:
    Entries carry their insertion time and are dropped lazily on read or
    eagerly by cleanup_expired(). The clock is injectable so expiry can be
    driven deterministically.
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")

Clock = Callable[[], datetime]


class TTLCache(Generic[K, V]):
    """
    A simple TTL-based cache with automatic expiration.

    Safe for single-threaded async use. Callers that await between a read
    and a write on the same key must hold their own asyncio.Lock.
    """

    def __init__(
        self,
        ttl: timedelta,
        max_size: int = 1000,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the TTL cache.

        Args:
            ttl: Time-to-live for cached items.
            max_size: Maximum number of items to store (oldest evicted first).
            clock: Returns the current time. Defaults to datetime.now.
        """
        self._ttl = ttl
        self._max_size = max_size
        self._clock: Clock = clock or datetime.now
        self._cache: Dict[K, Tuple[V, datetime]] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def _expired(self, cached_at: datetime, now: datetime) -> bool:
        return now - cached_at > self._ttl

    def get(self, key: K) -> Optional[V]:
        """
        Get an item from the cache if it exists and hasn't expired.

        Returns:
            The cached value or None if not found/expired.
        """
        if key not in self._cache:
            return None

        value, cached_at = self._cache[key]
        if self._expired(cached_at, self._clock()):
            self._cache.pop(key, None)
            return None

        return value

    def set(self, key: K, value: V) -> None:
        """Set an item in the cache, restarting its TTL."""
        if len(self._cache) >= self._max_size and key not in self._cache:
            self._evict_oldest()

        self._cache[key] = (value, self._clock())

    def items(self) -> Iterator[Tuple[K, V]]:
        """Iterate over live (key, value) pairs, oldest first."""
        now = self._clock()
        live: List[Tuple[K, V]] = [
            (k, v) for k, (v, cached_at) in self._cache.items()
            if not self._expired(cached_at, now)
        ]
        return iter(live)

    def _evict_oldest(self) -> None:
        if not self._cache:
            return
        oldest_key = min(self._cache.keys(), key=lambda k: self._cache[k][1])
        del self._cache[oldest_key]

    def cleanup_expired(self) -> int:
        """
        Remove all expired items from the cache.

        Returns:
            Number of items removed.
        """
        now = self._clock()
        expired_keys = [
            k for k, (_, cached_at) in self._cache.items()
            if self._expired(cached_at, now)
        ]
        for key in expired_keys:
            del self._cache[key]
        return len(expired_keys)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: K) -> bool:
        return self.get(key) is not None


__all__ = ["TTLCache", "Clock"]
