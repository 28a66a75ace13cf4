"""
In-memory TTL Cache for PricePulse
Holds per-product sentiment summaries between classifier runs.
"""

import time
import threading
from typing import Any, Optional, Dict

from flask import current_app


class TTLCache:
    """Thread-safe in-memory cache with TTL expiration."""

    def __init__(self, max_size: int = 100, ttl_seconds: int = 300):
        """
        Initialize TTL cache.

        Args:
            max_size: Maximum number of items to store
            ttl_seconds: Time-to-live in seconds for cache entries
        """
        self._entries: Dict[str, tuple] = {}
        self._max_size = max_size
        self._ttl_seconds = ttl_seconds
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, expires_at, _ = entry
            if time.time() > expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value; evicts the oldest entry when full."""
        with self._lock:
            if len(self._entries) >= self._max_size and key not in self._entries:
                self._evict_oldest()

            now = time.time()
            expires_at = now + (ttl if ttl is not None else self._ttl_seconds)
            self._entries[key] = (value, expires_at, now)

    def delete(self, key: str) -> bool:
        """Delete key from cache. Returns False if it was not cached."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._entries.clear()

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        oldest_key = min(self._entries, key=lambda k: self._entries[k][2])
        del self._entries[oldest_key]

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            return {
                "size": len(self._entries),
                "max_size": self._max_size,
                "ttl_seconds": self._ttl_seconds,
            }


def get_cache() -> TTLCache:
    """Get or create the cache of the current app."""
    cache = current_app.extensions.get("pricepulse_cache")
    if cache is None:
        cache = TTLCache(
            max_size=current_app.config.get("CACHE_MAX_SIZE", 100),
            ttl_seconds=current_app.config.get("CACHE_TTL_SECONDS", 300),
        )
        current_app.extensions["pricepulse_cache"] = cache
    return cache
