"""Valkey-based cache store for multi-process deployments."""

import asyncio
import logging
from typing import Optional, Union

from glide import (
    ExpirySet,
    ExpiryType,
    GlideClient,
    GlideClientConfiguration,
    NodeAddress,
    ServerCredentials,
)

from storefront_cache.storage.base import CacheStore

logger = logging.getLogger(__name__)


class ValkeyCacheStore(CacheStore):
    """Cache store backed by a Valkey (or Redis) server.

    Entries are plain string keys holding JSON text, written with
    SET ... EX so the server expires them. Pattern deletion walks the
    keyspace with SCAN MATCH rather than KEYS to avoid blocking the server.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: str = "",
        use_tls: bool = False,
        request_timeout_ms: int = 5000,
        key_prefix: str = "",
        scan_count: int = 500,
    ):
        """Initialize Valkey cache store.

        Args:
            host: Valkey host
            port: Valkey port
            password: Valkey password (empty for no auth)
            use_tls: Whether to use TLS for connection
            request_timeout_ms: Per-request timeout in milliseconds
            key_prefix: Namespace prepended to every key
            scan_count: SCAN batch size hint for pattern deletion
        """
        self.host = host
        self.port = port
        self.password = password
        self.use_tls = use_tls
        self.request_timeout_ms = request_timeout_ms
        self.key_prefix = key_prefix
        self.scan_count = scan_count
        self._client: Optional[GlideClient] = None
        self._connected = False
        self._connect_lock = asyncio.Lock()

    async def connect(self) -> None:
        """Connect to Valkey server.

        Also called lazily by every operation while disconnected, so a
        server that was down at startup is picked up once it is back.
        """
        async with self._connect_lock:
            if self._client is not None:
                return

            try:
                config = GlideClientConfiguration(
                    addresses=[NodeAddress(host=self.host, port=self.port)],
                    use_tls=self.use_tls,
                    credentials=ServerCredentials(password=self.password) if self.password else None,
                    request_timeout=self.request_timeout_ms,
                )
                self._client = await GlideClient.create(config)
                self._connected = True
                logger.info(f"Connected to Valkey at {self.host}:{self.port}")
            except Exception as e:
                logger.error(f"Failed to connect to Valkey: {e}")
                raise

    async def close(self) -> None:
        """Disconnect from Valkey server."""
        if self._client:
            await self._client.close()
            self._client = None
            self._connected = False
            logger.info("Disconnected from Valkey")

    async def _get_client(self) -> GlideClient:
        if self._client is None:
            await self.connect()
        return self._client

    def _full_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def _get_raw(self, key: str) -> Optional[str]:
        client = await self._get_client()
        value = await client.get(self._full_key(key))
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else value

    async def _set_raw(self, key: str, serialized: str, ttl_seconds: Optional[int]) -> None:
        client = await self._get_client()
        if ttl_seconds is not None:
            await client.set(self._full_key(key), serialized, expiry=ExpirySet(ExpiryType.SEC, ttl_seconds))
        else:
            await client.set(self._full_key(key), serialized)

    async def _delete(self, key: str) -> None:
        client = await self._get_client()
        await client.delete([self._full_key(key)])

    async def _delete_pattern(self, pattern: str) -> int:
        client = await self._get_client()
        cursor: Union[str, bytes] = "0"
        removed = 0

        while True:
            # SCAN returns [next_cursor, [key, ...]]
            result = await client.scan(cursor, match=self._full_key(pattern), count=self.scan_count)
            cursor = result[0]
            keys = result[1]
            if keys:
                removed += await client.delete(list(keys))
            if cursor in (b"0", "0"):
                break

        logger.debug(f"Swept {removed} keys matching {pattern}")
        return removed

    async def _ping(self) -> bool:
        client = await self._get_client()
        pong = await client.ping()
        # PONG may come back as bytes or str
        return pong == b"PONG" or pong == "PONG"

    async def _clear(self) -> None:
        if self.key_prefix:
            await self._delete_pattern("*")
        else:
            client = await self._get_client()
            await client.flushdb()
