"""Pydantic models for cached resources and API responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    """Product record as stored in the products table."""

    id: str = Field(..., description="Product identifier")
    name: str = Field(..., description="Display name")
    price: float = Field(..., ge=0, description="Unit price")
    image_url: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    details: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "1",
                    "name": "Fancy Watch",
                    "price": 199.0,
                    "image_url": "https://images.unsplash.com/photo-watch",
                    "category": "accessories",
                }
            ]
        }
    }


class WishlistItem(BaseModel):
    """Wishlist row joined with its product."""

    id: str
    product_id: str
    created_at: datetime
    product: Optional[Product] = None


class UserSession(BaseModel):
    """Session record for a user.

    The session table is schemaless from the cache's point of view, so
    extra columns are kept as-is.
    """

    user_id: str
    model_config = ConfigDict(extra="allow")


class ProductInvalidationRequest(BaseModel):
    """Request body for product cache invalidation."""

    product_id: Optional[str] = Field(None, description="Product that was written, or None for all products")


class InvalidationResponse(BaseModel):
    """Response for invalidation requests."""

    scope: str
    target: Optional[str] = None
    timestamp: datetime


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    version: str = "0.1.0"


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    degraded: bool = False
    checks: dict[str, str]
