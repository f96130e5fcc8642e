"""Cache key construction for storefront resources."""

from enum import Enum


class ResourceCategory(str, Enum):
    """Logical resource categories held in the cache."""

    PRODUCTS_ALL = "products-all"
    PRODUCT_BY_ID = "product-by-id"
    PRODUCT_BY_NAME = "product-by-name"
    PRODUCT_SEARCH = "product-search"
    USER_SESSION = "user-session"
    USER_WISHLIST = "user-wishlist"
    SEARCH_HISTORY = "search-history"


# Key prefixes are shared with the storefront frontend; changing them orphans live entries.
KEY_PREFIXES: dict[ResourceCategory, str] = {
    ResourceCategory.PRODUCTS_ALL: "products:all",
    ResourceCategory.PRODUCT_BY_ID: "product",
    # Not under "product:" so no product id can address a by-name entry
    ResourceCategory.PRODUCT_BY_NAME: "product-name",
    ResourceCategory.PRODUCT_SEARCH: "product",
    ResourceCategory.USER_SESSION: "user:session",
    ResourceCategory.USER_WISHLIST: "user:wishlist",
    ResourceCategory.SEARCH_HISTORY: "search:history",
}


def normalize_query(query: str) -> str:
    """Normalize a free-text query so equivalent queries share one key.

    Trims, collapses internal whitespace and case-folds. The same function
    must be applied on the lookup path and on the backing-store path.
    """
    return " ".join(query.split()).casefold()


def normalize_product_name(name: str) -> str:
    """Turn a product URL slug ("fancy-watch") into a normalized name."""
    return normalize_query(name.replace("-", " "))


def key_for_all(category: ResourceCategory) -> str:
    """Get the constant key for a whole-collection category.

    Args:
        category: Resource category

    Returns:
        Key such as "products:all"
    """
    return KEY_PREFIXES[category]


def key_for_entity(category: ResourceCategory, entity_id: str) -> str:
    """Get the key for a single entity of a category.

    Args:
        category: Resource category
        entity_id: Entity identifier (any string, empty included)

    Returns:
        Key in format "{prefix}:{entity_id}"
    """
    return f"{KEY_PREFIXES[category]}:{entity_id}"


def key_for_search(category: ResourceCategory, query: str) -> str:
    """Get the key for a search-result entry.

    Args:
        category: Resource category
        query: Raw query string, normalized here

    Returns:
        Key in format "{prefix}:search:{normalized query}"
    """
    return f"{KEY_PREFIXES[category]}:search:{normalize_query(query)}"


def search_pattern(category: ResourceCategory) -> str:
    """Glob pattern matching every search-result key of a category."""
    return f"{KEY_PREFIXES[category]}:search:*"


def entity_pattern(category: ResourceCategory) -> str:
    """Glob pattern matching every entity key of a category."""
    return f"{KEY_PREFIXES[category]}:*"
