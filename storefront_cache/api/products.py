"""Product lookup and product cache invalidation endpoints."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from storefront_cache.cache.lookup import CachedLookup
from storefront_cache.models import InvalidationResponse, Product, ProductInvalidationRequest

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["products"])

# Lookup layer will be injected
_lookup: Optional[CachedLookup] = None


def set_lookup(lookup: Optional[CachedLookup]) -> None:
    """Set the lookup layer for the products API."""
    global _lookup
    _lookup = lookup


def get_lookup() -> CachedLookup:
    """Get the current lookup layer."""
    if _lookup is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cache layer not initialized",
        )
    return _lookup


@router.get("/products", response_model=list[Product])
async def list_products() -> list[Product]:
    """List all products."""
    return await get_lookup().get_all_products()


@router.get("/products/search", response_model=list[Product])
async def search_products(q: str = Query(..., max_length=200, description="Search query")) -> list[Product]:
    """Search products by name."""
    return await get_lookup().search_products(q)


@router.get("/products/by-name/{name}", response_model=Product)
async def get_product_by_name(name: str) -> Product:
    """Get a product by name or URL slug."""
    product = await get_lookup().get_product_by_name(name)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product '{name}' not found")
    return product


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: str) -> Product:
    """Get a product by ID."""
    product = await get_lookup().get_product_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Product {product_id} not found")
    return product


@router.post("/cache/products/invalidate", response_model=InvalidationResponse)
async def invalidate_products(request: Optional[ProductInvalidationRequest] = None) -> InvalidationResponse:
    """Invalidate product caches after a product write."""
    product_id = request.product_id if request else None
    await get_lookup().invalidate_product_cache(product_id)
    log.info(f"Product cache invalidation requested (product_id={product_id})")
    return InvalidationResponse(scope="product", target=product_id, timestamp=datetime.now(timezone.utc))
