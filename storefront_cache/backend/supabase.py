"""Supabase (PostgREST) backing store."""

import asyncio
import logging
from typing import Any, Optional

import httpx

from storefront_cache.backend.base import BackingStore, BackingStoreError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class SupabaseBackingStore(BackingStore):
    """Read-only client for the storefront tables exposed by Supabase's REST API.

    Transient failures (transport errors, 5xx, 429) are retried with
    exponential backoff; anything else raises BackingStoreError at once.
    """

    def __init__(
        self,
        url: str,
        key: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        backoff_multiplier: float = 2.0,
        search_history_limit: int = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Supabase backing store.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            key: API key sent as apikey and bearer token
            timeout: Request timeout in seconds
            max_attempts: Attempts per request, including the first
            base_delay: Delay before the first retry in seconds
            max_delay: Upper bound for a single retry delay in seconds
            backoff_multiplier: Growth factor between retries
            search_history_limit: Maximum queries returned per user
            transport: Optional httpx transport (used by tests)
        """
        if not url or not key:
            logger.warning("Supabase URL or key not set")

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.backoff_multiplier = backoff_multiplier
        self.search_history_limit = search_history_limit
        self._client = httpx.AsyncClient(
            base_url=url,
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def _retry_delay(self, attempt: int) -> float:
        """Backoff delay after the given (1-based) failed attempt."""
        delay = self.base_delay * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_delay)

    async def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        """Run a GET against /rest/v1/{table}, retrying transient failures.

        Raises:
            BackingStoreError: If the query fails or retries are exhausted
        """
        last_error: Optional[BackingStoreError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await self._client.get(f"/rest/v1/{table}", params=params)
            except httpx.TransportError as e:
                last_error = BackingStoreError(f"Supabase request to {table} failed: {e}")
            else:
                if response.status_code < 400:
                    return response.json()

                last_error = BackingStoreError(
                    f"Supabase query on {table} failed with {response.status_code}: {response.text}",
                    status_code=response.status_code,
                )
                if response.status_code not in RETRYABLE_STATUS_CODES:
                    raise last_error

            if attempt < self.max_attempts:
                delay = self._retry_delay(attempt)
                logger.warning(f"Attempt {attempt} on {table} failed, retrying in {delay:.2f}s: {last_error}")
                await asyncio.sleep(delay)

        assert last_error is not None
        raise last_error

    async def _select_one(self, table: str, params: dict[str, str]) -> Optional[dict[str, Any]]:
        rows = await self._select(table, {**params, "limit": "1"})
        return rows[0] if rows else None

    async def fetch_all_products(self) -> list[dict[str, Any]]:
        return await self._select("products", {"select": "*"})

    async def fetch_product_by_id(self, product_id: str) -> Optional[dict[str, Any]]:
        return await self._select_one("products", {"select": "*", "id": f"eq.{product_id}"})

    async def fetch_product_by_name(self, name: str) -> Optional[dict[str, Any]]:
        return await self._select_one("products", {"select": "*", "name": f"ilike.{name}"})

    async def search_products(self, query: str) -> list[dict[str, Any]]:
        return await self._select("products", {"select": "*", "name": f"ilike.*{query}*"})

    async def fetch_user_session(self, user_id: str) -> Optional[dict[str, Any]]:
        return await self._select_one("user_sessions", {"select": "*", "user_id": f"eq.{user_id}"})

    async def fetch_user_wishlist(self, user_id: str) -> list[dict[str, Any]]:
        return await self._select(
            "wishlist",
            {
                "select": "id,product_id,created_at,product:products(*)",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
            },
        )

    async def fetch_search_history(self, user_id: str) -> list[str]:
        rows = await self._select(
            "search_history",
            {
                "select": "query",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
                "limit": str(self.search_history_limit),
            },
        )
        return [row["query"] for row in rows]

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
