"""User lookup and user cache invalidation endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from storefront_cache.api.products import get_lookup
from storefront_cache.models import InvalidationResponse, UserSession, WishlistItem

router = APIRouter(prefix="/api/v1", tags=["users"])


@router.get("/users/{user_id}/session", response_model=UserSession)
async def get_user_session(user_id: str) -> UserSession:
    """Get the session record of a user."""
    session = await get_lookup().get_user_session(user_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No session for user {user_id}")
    return session


@router.get("/users/{user_id}/wishlist", response_model=list[WishlistItem])
async def get_user_wishlist(user_id: str) -> list[WishlistItem]:
    """Get the wishlist of a user."""
    return await get_lookup().get_user_wishlist(user_id)


@router.get("/users/{user_id}/search-history", response_model=list[str])
async def get_search_history(user_id: str) -> list[str]:
    """Get recent searches of a user."""
    return await get_lookup().get_search_history(user_id)


@router.post("/cache/users/{user_id}/invalidate", response_model=InvalidationResponse)
async def invalidate_user(user_id: str) -> InvalidationResponse:
    """Invalidate a user's cached session, wishlist and search history."""
    await get_lookup().invalidate_user_cache(user_id)
    return InvalidationResponse(scope="user", target=user_id, timestamp=datetime.now(timezone.utc))
