"""Shared test fixtures and utilities."""

from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient

from storefront_cache.api import health, products
from storefront_cache.backend.memory import InMemoryBackingStore
from storefront_cache.cache.lookup import CachedLookup
from storefront_cache.main import app
from storefront_cache.storage.base import CacheStore
from storefront_cache.storage.memory import MemoryCacheStore

SAMPLE_PRODUCTS = [
    {"id": "1", "name": "Fancy Watch", "price": 199.0, "category": "accessories"},
    {"id": "2", "name": "Sports Watch", "price": 89.5, "category": "accessories"},
    {"id": "3", "name": "Linen Shirt", "price": 45.0, "category": "clothing"},
]


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UnavailableCacheStore(CacheStore):
    """Cache medium whose every raw operation fails, like a dead server."""

    async def _get_raw(self, key: str) -> Optional[str]:
        raise ConnectionError("connection refused")

    async def _set_raw(self, key: str, serialized: str, ttl_seconds: Optional[int]) -> None:
        raise ConnectionError("connection refused")

    async def _delete(self, key: str) -> None:
        raise ConnectionError("connection refused")

    async def _delete_pattern(self, pattern: str) -> int:
        raise ConnectionError("connection refused")

    async def _ping(self) -> bool:
        raise TimeoutError("ping timed out")

    async def _clear(self) -> None:
        raise ConnectionError("connection refused")


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def cache_store(clock):
    """Create a fresh in-memory cache store driven by the fake clock."""
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def backing_store():
    """Create a backing store seeded with products and user data."""
    return InMemoryBackingStore(
        products=SAMPLE_PRODUCTS,
        sessions={"user-1": {"user_id": "user-1", "cart_size": 2, "theme": "dark"}},
        wishlists={
            "user-1": [
                {"id": "w1", "product_id": "1", "created_at": "2025-01-01T10:00:00+00:00"},
                {"id": "w2", "product_id": "3", "created_at": "2025-01-02T10:00:00+00:00"},
            ]
        },
        search_history={"user-1": ["watch", "linen shirt"]},
    )


@pytest.fixture
def lookup(cache_store, backing_store):
    """Create a lookup layer over the fresh cache and seeded backing store."""
    return CachedLookup(cache_store, backing_store)


@pytest.fixture
async def client(cache_store, lookup):
    """Create an HTTP test client wired to the fixture lookup layer."""
    products.set_lookup(lookup)
    health.set_store(cache_store)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    products.set_lookup(None)
    health.set_store(None)


@pytest.fixture
def unavailable_store():
    """Create a cache store whose medium is down."""
    return UnavailableCacheStore()
