"""Write-triggered cache invalidation."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Optional

from storefront_cache.cache.keys import (
    ResourceCategory,
    entity_pattern,
    key_for_all,
    key_for_entity,
    search_pattern,
)
from storefront_cache.storage.base import CacheStore
from storefront_cache.utils.metrics import cache_invalidations_total

logger = logging.getLogger(__name__)


class InvalidationCoordinator:
    """Translates "this resource was written" into the cache keys to clear.

    A product write sweeps every cached search result and name lookup
    rather than the affected queries only. Failures are logged and
    swallowed so they never fail the write that triggered them.
    """

    def __init__(self, store: CacheStore):
        """Initialize the coordinator.

        Args:
            store: Cache store to clear entries from
        """
        self._store = store

    async def _run(self, scope: str, description: str, step: Callable[[], Awaitable[Any]]) -> bool:
        try:
            await step()
            return True
        except Exception as e:
            logger.error(f"Failed to invalidate {description} ({scope}): {e}")
            return False

    async def invalidate_product(self, product_id: Optional[str] = None) -> None:
        """Clear cache entries affected by a product write.

        Args:
            product_id: The written product, or None when the write is not tied to one
        """
        steps: list[tuple[str, Callable[[], Awaitable[Any]]]] = [
            ("product list", lambda: self._store.delete(key_for_all(ResourceCategory.PRODUCTS_ALL))),
        ]
        if product_id is not None:
            product_key = key_for_entity(ResourceCategory.PRODUCT_BY_ID, product_id)
            steps.append((product_key, lambda: self._store.delete(product_key)))
        steps += [
            ("search results", lambda: self._store.delete_by_pattern(search_pattern(ResourceCategory.PRODUCT_SEARCH))),
            ("name lookups", lambda: self._store.delete_by_pattern(entity_pattern(ResourceCategory.PRODUCT_BY_NAME))),
        ]

        ok = True
        for description, step in steps:
            ok = await self._run("product", description, step) and ok

        cache_invalidations_total.labels(scope="product", status="ok" if ok else "error").inc()
        logger.info(f"Invalidated product cache (product_id={product_id})")

    async def invalidate_user(self, user_id: str) -> None:
        """Clear every cache entry belonging to a user.

        Args:
            user_id: User whose data was written
        """
        ok = True
        for category in (
            ResourceCategory.USER_SESSION,
            ResourceCategory.USER_WISHLIST,
            ResourceCategory.SEARCH_HISTORY,
        ):
            key = key_for_entity(category, user_id)
            ok = await self._run("user", key, lambda: self._store.delete(key)) and ok

        cache_invalidations_total.labels(scope="user", status="ok" if ok else "error").inc()
        logger.info(f"Invalidated user cache (user_id={user_id})")
