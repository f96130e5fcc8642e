"""Read-through lookups for storefront resources.

Every lookup follows the same path: derive the key, try the cache, fall
back to the backing store on a miss and populate the cache with the TTL
of the resource category. Neither cache nor backing-store failures escape
as exceptions; callers get the category's empty value instead.

Concurrent misses on the same key are not coalesced: both callers fetch
from the backing store and the last write to the cache wins.
"""

import logging
from collections.abc import Awaitable, Mapping
from typing import Any, Callable, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from storefront_cache.backend.base import BackingStore
from storefront_cache.cache.invalidation import InvalidationCoordinator
from storefront_cache.cache.keys import (
    ResourceCategory,
    key_for_all,
    key_for_entity,
    key_for_search,
    normalize_product_name,
    normalize_query,
)
from storefront_cache.cache.policy import DEFAULT_TTL_POLICY, ttl_for
from storefront_cache.models import Product, UserSession, WishlistItem
from storefront_cache.storage.base import CacheStore
from storefront_cache.utils.metrics import backing_store_errors_total, cache_requests_total

logger = logging.getLogger(__name__)

T = TypeVar("T")

_products_adapter = TypeAdapter(list[Product])
_product_adapter = TypeAdapter(Optional[Product])
_session_adapter = TypeAdapter(Optional[UserSession])
_wishlist_adapter = TypeAdapter(list[WishlistItem])
_history_adapter = TypeAdapter(list[str])


class CachedLookup:
    """Public cache-aware API over the backing store."""

    def __init__(
        self,
        store: CacheStore,
        backend: BackingStore,
        ttl_policy: Mapping[ResourceCategory, int] = DEFAULT_TTL_POLICY,
    ):
        """Initialize the lookup layer.

        Args:
            store: Cache medium
            backend: Authoritative data source
            ttl_policy: TTL per category, consulted when populating the cache
        """
        self._store = store
        self._backend = backend
        self._ttl_policy = ttl_policy
        self.invalidation = InvalidationCoordinator(store)

    async def _read_through(
        self,
        category: ResourceCategory,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        adapter: TypeAdapter[T],
        empty: Callable[[], T],
    ) -> T:
        cached = await self._store.get(key)
        if cached is not None:
            try:
                value = adapter.validate_python(cached)
            except ValidationError as e:
                logger.warning(f"Ignoring cached {category.value} entry {key} with unexpected shape: {e}")
            else:
                cache_requests_total.labels(category=category.value, result="hit").inc()
                logger.debug(f"Cache hit for {key}")
                return value

        cache_requests_total.labels(category=category.value, result="miss").inc()
        logger.debug(f"Cache miss for {key}")

        try:
            value = adapter.validate_python(await fetch())
        except Exception as e:
            logger.error(f"Error fetching {category.value} for {key}: {e}")
            backing_store_errors_total.labels(category=category.value).inc()
            return empty()

        # A cached null reads back as a miss, so not-found results are not stored
        if value is not None:
            await self._store.set(
                key,
                adapter.dump_python(value, mode="json"),
                ttl_for(category, self._ttl_policy),
            )
        return value

    async def get_all_products(self) -> list[Product]:
        """Get every product."""
        return await self._read_through(
            ResourceCategory.PRODUCTS_ALL,
            key_for_all(ResourceCategory.PRODUCTS_ALL),
            self._backend.fetch_all_products,
            _products_adapter,
            list,
        )

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        """Get a product by ID, or None if it does not exist or cannot be fetched."""
        return await self._read_through(
            ResourceCategory.PRODUCT_BY_ID,
            key_for_entity(ResourceCategory.PRODUCT_BY_ID, product_id),
            lambda: self._backend.fetch_product_by_id(product_id),
            _product_adapter,
            lambda: None,
        )

    async def get_product_by_name(self, name: str) -> Optional[Product]:
        """Get a product by its name or URL slug ("fancy-watch" matches "Fancy Watch")."""
        normalized = normalize_product_name(name)
        return await self._read_through(
            ResourceCategory.PRODUCT_BY_NAME,
            key_for_entity(ResourceCategory.PRODUCT_BY_NAME, normalized),
            lambda: self._backend.fetch_product_by_name(normalized),
            _product_adapter,
            lambda: None,
        )

    async def search_products(self, query: str) -> list[Product]:
        """Search products by name; queries differing only in case or spacing share an entry."""
        normalized = normalize_query(query)
        return await self._read_through(
            ResourceCategory.PRODUCT_SEARCH,
            key_for_search(ResourceCategory.PRODUCT_SEARCH, normalized),
            lambda: self._backend.search_products(normalized),
            _products_adapter,
            list,
        )

    async def get_user_session(self, user_id: str) -> Optional[UserSession]:
        """Get the session record of a user."""
        return await self._read_through(
            ResourceCategory.USER_SESSION,
            key_for_entity(ResourceCategory.USER_SESSION, user_id),
            lambda: self._backend.fetch_user_session(user_id),
            _session_adapter,
            lambda: None,
        )

    async def get_user_wishlist(self, user_id: str) -> list[WishlistItem]:
        """Get the wishlist of a user, newest first."""
        return await self._read_through(
            ResourceCategory.USER_WISHLIST,
            key_for_entity(ResourceCategory.USER_WISHLIST, user_id),
            lambda: self._backend.fetch_user_wishlist(user_id),
            _wishlist_adapter,
            list,
        )

    async def get_search_history(self, user_id: str) -> list[str]:
        """Get recent search queries of a user."""
        return await self._read_through(
            ResourceCategory.SEARCH_HISTORY,
            key_for_entity(ResourceCategory.SEARCH_HISTORY, user_id),
            lambda: self._backend.fetch_search_history(user_id),
            _history_adapter,
            list,
        )

    async def invalidate_product_cache(self, product_id: Optional[str] = None) -> None:
        """Call after any product write to the backing store."""
        await self.invalidation.invalidate_product(product_id)

    async def invalidate_user_cache(self, user_id: str) -> None:
        """Call after any write to a user's session, wishlist or search history."""
        await self.invalidation.invalidate_user(user_id)
