"""Base cache store interface."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from storefront_cache.utils.metrics import cache_errors_total

logger = logging.getLogger(__name__)

GLOB_SPECIAL_CHARS = frozenset("*?[]\\")


class CacheStore(ABC):
    """Abstract key-value cache medium with per-entry TTL.

    Public methods never raise: a failing medium degrades to misses and
    no-ops so the application keeps serving from the backing store.
    Subclasses implement the raw ``_``-prefixed hooks and may raise freely.
    Values are stored as JSON text.
    """

    async def get(self, key: str) -> Optional[Any]:
        """Get a cached value.

        Args:
            key: Cache key

        Returns:
            Decoded value, or None if absent, expired, unreadable or the medium failed
        """
        try:
            raw = await self._get_raw(key)
        except Exception as e:
            logger.error(f"Cache get error for {key}: {e}")
            cache_errors_total.labels(operation="get").inc()
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.error(f"Discarding unreadable cache payload for {key}: {e}")
            cache_errors_total.labels(operation="decode").inc()
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store a value, replacing any existing entry.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl_seconds: Seconds until expiry, or None to keep until deleted.
                A TTL of zero or less removes the key instead.
        """
        if ttl_seconds is not None and ttl_seconds <= 0:
            await self.delete(key)
            return

        try:
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Cannot serialize value for {key}: {e}")
            cache_errors_total.labels(operation="encode").inc()
            return

        try:
            await self._set_raw(key, serialized, ttl_seconds)
        except Exception as e:
            logger.error(f"Cache set error for {key}: {e}")
            cache_errors_total.labels(operation="set").inc()

    async def delete(self, key: str) -> None:
        """Delete one entry. Absent keys are a no-op."""
        try:
            await self._delete(key)
        except Exception as e:
            logger.error(f"Cache delete error for {key}: {e}")
            cache_errors_total.labels(operation="delete").inc()

    async def delete_by_pattern(self, pattern: str) -> int:
        """Delete every entry whose key starts with a literal prefix.

        Only patterns of the form "<prefix>*" are accepted, with no other
        glob characters in the prefix, because Redis MATCH and Python glob
        syntax disagree on character classes and escaping. Best-effort:
        entries inserted concurrently may survive the sweep.

        Args:
            pattern: Prefix pattern such as "product:search:*"

        Returns:
            Number of entries removed (0 on failure or unsupported pattern)
        """
        if not pattern.endswith("*") or GLOB_SPECIAL_CHARS & set(pattern[:-1]):
            logger.error(f"Unsupported cache key pattern {pattern!r}, expected '<prefix>*'")
            cache_errors_total.labels(operation="delete_by_pattern").inc()
            return 0

        try:
            return await self._delete_pattern(pattern)
        except Exception as e:
            logger.error(f"Cache delete_by_pattern error for {pattern}: {e}")
            cache_errors_total.labels(operation="delete_by_pattern").inc()
            return 0

    async def health_check(self) -> bool:
        """Check whether the cache medium is reachable."""
        try:
            return await self._ping()
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return False

    async def clear(self) -> None:
        """Drop every entry."""
        try:
            await self._clear()
        except Exception as e:
            logger.error(f"Cache clear error: {e}")
            cache_errors_total.labels(operation="clear").inc()

    async def connect(self) -> None:
        """Open the connection to the medium (no-op by default)."""

    async def close(self) -> None:
        """Close the connection to the medium (no-op by default)."""

    @abstractmethod
    async def _get_raw(self, key: str) -> Optional[str]:
        """Return the stored JSON text, or None if absent or expired."""
        pass

    @abstractmethod
    async def _set_raw(self, key: str, serialized: str, ttl_seconds: Optional[int]) -> None:
        """Store JSON text with an optional TTL."""
        pass

    @abstractmethod
    async def _delete(self, key: str) -> None:
        """Remove one key."""
        pass

    @abstractmethod
    async def _delete_pattern(self, pattern: str) -> int:
        """Remove keys matching "<prefix>*", returning how many were removed."""
        pass

    @abstractmethod
    async def _ping(self) -> bool:
        """Probe the medium."""
        pass

    @abstractmethod
    async def _clear(self) -> None:
        """Remove all keys."""
        pass
