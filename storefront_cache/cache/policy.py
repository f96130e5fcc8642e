"""Time-to-live policy per resource category."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from storefront_cache.cache.keys import ResourceCategory

DEFAULT_TTL_POLICY: Mapping[ResourceCategory, int] = MappingProxyType(
    {
        ResourceCategory.PRODUCTS_ALL: 300,  # 5 minutes
        ResourceCategory.PRODUCT_BY_ID: 600,  # 10 minutes
        ResourceCategory.PRODUCT_BY_NAME: 600,  # 10 minutes, same records as by-id
        ResourceCategory.PRODUCT_SEARCH: 180,  # 3 minutes
        ResourceCategory.USER_SESSION: 3600,  # 1 hour
        ResourceCategory.USER_WISHLIST: 300,  # 5 minutes
        ResourceCategory.SEARCH_HISTORY: 86400,  # 24 hours
    }
)


def ttl_for(category: ResourceCategory, policy: Mapping[ResourceCategory, int] = DEFAULT_TTL_POLICY) -> int:
    """Get the TTL in seconds for a category."""
    return policy[category]


def build_ttl_policy(overrides: Optional[Mapping[str, int]] = None) -> Mapping[ResourceCategory, int]:
    """Merge configured overrides over the default TTL table.

    Args:
        overrides: Mapping of category value (e.g. "product-search") to TTL seconds

    Returns:
        Read-only policy mapping covering every category

    Raises:
        ValueError: If a category is unknown or a TTL is not positive
    """
    policy = dict(DEFAULT_TTL_POLICY)
    for name, ttl in (overrides or {}).items():
        try:
            category = ResourceCategory(name)
        except ValueError:
            raise ValueError(f"Unknown cache category in TTL overrides: {name!r}") from None
        if ttl <= 0:
            raise ValueError(f"TTL for {name!r} must be positive, got {ttl}")
        policy[category] = int(ttl)
    return MappingProxyType(policy)
