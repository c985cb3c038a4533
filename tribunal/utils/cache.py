"""
Tribunal - TTL Cache
====================

Small TTL-based cache used for per-guild settings.
"""

from datetime import datetime, timedelta
from typing import Dict, Generic, Optional, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """
    A simple TTL-based cache with automatic expiration.

    Safe for single-threaded async use.
    """

    def __init__(self, ttl: timedelta, max_size: int = 100):
        """
        Initialize the TTL cache.

        Args:
            ttl: Time-to-live for cached items.
            max_size: Maximum number of items to store (oldest evicted first).
        """
        self._ttl = ttl
        self._max_size = max_size
        self._cache: Dict[K, Tuple[V, datetime]] = {}

    def get(self, key: K) -> Optional[V]:
        """Get an item if it exists and hasn't expired, else None."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        value, cached_at = entry
        if datetime.now() - cached_at > self._ttl:
            self._cache.pop(key, None)
            return None

        return value

    def set(self, key: K, value: V) -> None:
        """Set an item, evicting the oldest entry when full."""
        if len(self._cache) >= self._max_size and key not in self._cache:
            self._evict_oldest()

        self._cache[key] = (value, datetime.now())

    def delete(self, key: K) -> bool:
        """
        Delete an item from the cache.

        Returns:
            True if item was deleted, False if not found.
        """
        return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all items from the cache."""
        self._cache.clear()

    def _evict_oldest(self) -> None:
        if not self._cache:
            return
        oldest_key = min(self._cache, key=lambda k: self._cache[k][1])
        self._cache.pop(oldest_key, None)

    def cleanup_expired(self) -> int:
        """
        Remove all expired items from the cache.

        Returns:
            Number of items removed.
        """
        now = datetime.now()
        expired_keys = [
            k for k, (_, cached_at) in self._cache.items()
            if now - cached_at > self._ttl
        ]
        for key in expired_keys:
            self._cache.pop(key, None)
        return len(expired_keys)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: K) -> bool:
        return self.get(key) is not None


__all__ = ["TTLCache"]
