"""Main FastAPI application."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Union

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from storefront_cache.api import health, products, users
from storefront_cache.backend.base import BackingStore
from storefront_cache.backend.memory import InMemoryBackingStore
from storefront_cache.backend.supabase import SupabaseBackingStore
from storefront_cache.cache.lookup import CachedLookup
from storefront_cache.cache.policy import build_ttl_policy
from storefront_cache.config import Settings, settings
from storefront_cache.storage.memory import MemoryCacheStore
from storefront_cache.storage.valkey import ValkeyCacheStore

logging.basicConfig(level=settings.log_level)
log = logging.getLogger(__name__)


def build_cache_store(config: Settings) -> Union[ValkeyCacheStore, MemoryCacheStore]:
    """Create the configured cache medium (not yet connected)."""
    if config.cache_backend == "valkey":
        log.info("Using Valkey cache backend")
        return ValkeyCacheStore(
            host=config.valkey_host,
            port=config.valkey_port,
            password=config.valkey_password,
            use_tls=config.valkey_use_tls,
            request_timeout_ms=config.valkey_request_timeout_ms,
            key_prefix=config.valkey_key_prefix,
        )
    log.info("Using in-memory cache backend")
    return MemoryCacheStore(max_entries=config.cache_max_entries)


def build_backing_store(config: Settings) -> BackingStore:
    """Create the configured backing store."""
    if config.backing_store == "supabase":
        log.info("Using Supabase backing store")
        return SupabaseBackingStore(
            url=config.supabase_url,
            key=config.supabase_key,
            timeout=config.supabase_timeout,
            max_attempts=config.supabase_max_attempts,
        )
    log.info("Using in-memory backing store")
    return InMemoryBackingStore()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events (startup and shutdown)."""
    log.info("Starting up application...")

    ttl_policy = build_ttl_policy(settings.ttl_overrides)

    store = build_cache_store(settings)
    try:
        await store.connect()
    except Exception as e:
        # Lookups degrade to backing-store calls until the cache is reachable
        log.error(f"Cache unavailable at startup, running without cache: {e}")

    backend = build_backing_store(settings)
    lookup = CachedLookup(store, backend, ttl_policy=ttl_policy)

    app.state.cache_store = store
    app.state.backing_store = backend
    app.state.lookup = lookup

    health.set_store(store)
    products.set_lookup(lookup)

    log.info("Application startup complete")

    yield  # Application is running

    log.info("Shutting down application...")
    products.set_lookup(None)
    health.set_store(None)
    await backend.close()
    await store.close()
    log.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Read-through cache in front of the storefront product and user data",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(products.router)
app.include_router(users.router)

Instrumentator().instrument(app).expose(app, endpoint="/metrics")


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": str(exc) if settings.log_level == "DEBUG" else None,
        },
    )
