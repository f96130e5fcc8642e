"""Base backing store interface.

The backing store is the authoritative data source behind the cache. The
cache layer only ever reads from it.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class BackingStoreError(Exception):
    """Raised when the backing store cannot answer a query."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BackingStore(ABC):
    """Abstract base class for backing stores.

    Fetches return plain JSON-like records. A legitimate "not found" is
    ``None`` for single records and ``[]`` for collections; failures raise.
    """

    @abstractmethod
    async def fetch_all_products(self) -> list[dict[str, Any]]:
        """Fetch every product."""
        pass

    @abstractmethod
    async def fetch_product_by_id(self, product_id: str) -> Optional[dict[str, Any]]:
        """Fetch one product by ID."""
        pass

    @abstractmethod
    async def fetch_product_by_name(self, name: str) -> Optional[dict[str, Any]]:
        """Fetch one product by case-insensitive name match.

        Args:
            name: Normalized product name (lowercase, single-spaced)
        """
        pass

    @abstractmethod
    async def search_products(self, query: str) -> list[dict[str, Any]]:
        """Fetch products whose name contains the normalized query."""
        pass

    @abstractmethod
    async def fetch_user_session(self, user_id: str) -> Optional[dict[str, Any]]:
        """Fetch the session record of a user."""
        pass

    @abstractmethod
    async def fetch_user_wishlist(self, user_id: str) -> list[dict[str, Any]]:
        """Fetch wishlist rows of a user, newest first, each joined with its product."""
        pass

    @abstractmethod
    async def fetch_search_history(self, user_id: str) -> list[str]:
        """Fetch recent search queries of a user, newest first."""
        pass

    async def close(self) -> None:
        """Release connections (no-op by default)."""
