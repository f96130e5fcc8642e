"""In-memory cache store for single-process deployments and testing."""

import asyncio
import time
from typing import Callable, Optional

from storefront_cache.storage.base import CacheStore


class MemoryCacheStore(CacheStore):
    """In-process cache keyed by string with lazy TTL expiry.

    When full, expired entries are purged first, then the least recently
    written entry is evicted.
    """

    def __init__(self, max_entries: int = 10000, clock: Callable[[], float] = time.monotonic):
        """Initialize memory cache store.

        Args:
            max_entries: Maximum entries to hold before evicting
            clock: Source of the current time in seconds
        """
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, tuple[str, Optional[float]]] = {}  # key -> (json, expires_at)
        self._lock = asyncio.Lock()

    def _is_expired(self, expires_at: Optional[float]) -> bool:
        return expires_at is not None and self._clock() >= expires_at

    async def _get_raw(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            serialized, expires_at = entry
            if self._is_expired(expires_at):
                del self._entries[key]
                return None

            return serialized

    async def _set_raw(self, key: str, serialized: str, ttl_seconds: Optional[int]) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds is not None else None
        async with self._lock:
            # Re-inserting moves the key to the end of the eviction order
            self._entries.pop(key, None)

            if len(self._entries) >= self.max_entries:
                self._purge_expired()
            if len(self._entries) >= self.max_entries:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]

            self._entries[key] = (serialized, expires_at)

    def _purge_expired(self) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if self._is_expired(expires_at)]
        for key in expired:
            del self._entries[key]

    async def _delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def _delete_pattern(self, pattern: str) -> int:
        prefix = pattern[:-1]
        async with self._lock:
            matched = [key for key in self._entries if key.startswith(prefix)]
            for key in matched:
                del self._entries[key]
            return len(matched)

    async def _ping(self) -> bool:
        return True

    async def _clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def keys(self) -> list[str]:
        """List live (non-expired) keys."""
        async with self._lock:
            return [key for key, (_, expires_at) in self._entries.items() if not self._is_expired(expires_at)]

    async def ttl(self, key: str) -> Optional[float]:
        """Get the remaining lifetime of a live entry in seconds.

        Returns:
            Seconds left, or None if the key is absent, expired, or has no expiry
        """
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[1] is None or self._is_expired(entry[1]):
                return None
            return entry[1] - self._clock()
