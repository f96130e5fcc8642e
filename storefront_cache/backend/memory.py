"""In-memory backing store for development and testing."""

import logging
from collections import Counter
from copy import deepcopy
from typing import Any, Optional

from storefront_cache.backend.base import BackingStore

logger = logging.getLogger(__name__)


class InMemoryBackingStore(BackingStore):
    """Backing store over plain dicts.

    Keeps per-operation call counts so callers can tell cache hits from
    backing-store round trips.
    """

    def __init__(
        self,
        products: Optional[list[dict[str, Any]]] = None,
        sessions: Optional[dict[str, dict[str, Any]]] = None,
        wishlists: Optional[dict[str, list[dict[str, Any]]]] = None,
        search_history: Optional[dict[str, list[str]]] = None,
    ):
        """Initialize in-memory backing store.

        Args:
            products: Product records
            sessions: user_id -> session record
            wishlists: user_id -> wishlist rows (with "product_id" and "created_at")
            search_history: user_id -> queries, newest first
        """
        self._products: dict[str, dict[str, Any]] = {p["id"]: deepcopy(p) for p in products or []}
        self._sessions = deepcopy(sessions or {})
        self._wishlists = deepcopy(wishlists or {})
        self._search_history = deepcopy(search_history or {})
        self.calls: Counter[str] = Counter()
        logger.info("Initialized InMemoryBackingStore")

    def put_product(self, product: dict[str, Any]) -> None:
        """Insert or replace a product (simulates a write by the application)."""
        self._products[product["id"]] = deepcopy(product)

    def remove_product(self, product_id: str) -> None:
        """Remove a product (simulates a write by the application)."""
        self._products.pop(product_id, None)

    async def fetch_all_products(self) -> list[dict[str, Any]]:
        self.calls["fetch_all_products"] += 1
        return [deepcopy(p) for p in self._products.values()]

    async def fetch_product_by_id(self, product_id: str) -> Optional[dict[str, Any]]:
        self.calls["fetch_product_by_id"] += 1
        product = self._products.get(product_id)
        return deepcopy(product) if product else None

    async def fetch_product_by_name(self, name: str) -> Optional[dict[str, Any]]:
        self.calls["fetch_product_by_name"] += 1
        for product in self._products.values():
            if product["name"].casefold() == name.casefold():
                return deepcopy(product)
        return None

    async def search_products(self, query: str) -> list[dict[str, Any]]:
        self.calls["search_products"] += 1
        needle = query.casefold()
        return [deepcopy(p) for p in self._products.values() if needle in p["name"].casefold()]

    async def fetch_user_session(self, user_id: str) -> Optional[dict[str, Any]]:
        self.calls["fetch_user_session"] += 1
        session = self._sessions.get(user_id)
        return deepcopy(session) if session else None

    async def fetch_user_wishlist(self, user_id: str) -> list[dict[str, Any]]:
        self.calls["fetch_user_wishlist"] += 1
        rows = sorted(self._wishlists.get(user_id, []), key=lambda row: row["created_at"], reverse=True)
        return [{**deepcopy(row), "product": deepcopy(self._products.get(row["product_id"]))} for row in rows]

    async def fetch_search_history(self, user_id: str) -> list[str]:
        self.calls["fetch_search_history"] += 1
        return list(self._search_history.get(user_id, []))
