"""Health and readiness check endpoints."""

import datetime
from typing import Optional

from fastapi import APIRouter

from storefront_cache.models import HealthResponse, ReadinessResponse
from storefront_cache.storage.base import CacheStore

router = APIRouter(tags=["health"])

# Cache store will be injected
_store: Optional[CacheStore] = None


def set_store(store: Optional[CacheStore]) -> None:
    """Set the cache store for health checks."""
    global _store
    _store = store


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="healthy", timestamp=datetime.datetime.now(datetime.timezone.utc))


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Readiness check with cache status.

    An unreachable cache only degrades the service: lookups fall through
    to the backing store, so the service stays ready.
    """
    if _store is None:
        return ReadinessResponse(ready=False, checks={"cache": "not_initialized"})

    cache_ok = await _store.health_check()
    return ReadinessResponse(
        ready=True,
        degraded=not cache_ok,
        checks={"cache": "ok" if cache_ok else "unavailable"},
    )
