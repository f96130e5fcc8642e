"""Tests for Valkey cache store."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from glide import ExpiryType

from storefront_cache.storage.valkey import ValkeyCacheStore


@pytest.fixture
async def valkey_store():
    """Create a ValkeyCacheStore instance with mocked client."""
    store = ValkeyCacheStore(host="localhost", port=6379)
    # Mock the Glide client
    store._client = AsyncMock()
    store._connected = True
    return store


class TestValkeyCacheStore:
    """Test ValkeyCacheStore implementation."""

    @pytest.mark.asyncio
    async def test_get(self, valkey_store):
        """Test reading and decoding a stored value."""
        valkey_store._client.get = AsyncMock(return_value=json.dumps([{"id": "1"}]).encode())

        value = await valkey_store.get("products:all")

        assert value == [{"id": "1"}]
        valkey_store._client.get.assert_called_once_with("products:all")

    @pytest.mark.asyncio
    async def test_get_missing(self, valkey_store):
        """Test that a nil reply is a miss."""
        valkey_store._client.get = AsyncMock(return_value=None)

        assert await valkey_store.get("product:x") is None

    @pytest.mark.asyncio
    async def test_get_corrupted_payload(self, valkey_store):
        """Test that an unparseable payload is a miss, not an error."""
        valkey_store._client.get = AsyncMock(return_value=b"\x00garbage")

        assert await valkey_store.get("product:x") is None

    @pytest.mark.asyncio
    async def test_get_connection_error(self, valkey_store):
        """Test that a failing GET degrades to a miss."""
        valkey_store._client.get = AsyncMock(side_effect=ConnectionError("refused"))

        assert await valkey_store.get("product:x") is None

    @pytest.mark.asyncio
    async def test_set_with_ttl(self, valkey_store):
        """Test that a TTL is passed as SET ... EX."""
        valkey_store._client.set = AsyncMock(return_value="OK")

        with patch("storefront_cache.storage.valkey.ExpirySet") as expiry_set:
            await valkey_store.set("product:1", {"id": "1"}, 600)

        expiry_set.assert_called_once_with(ExpiryType.SEC, 600)
        call_args = valkey_store._client.set.call_args
        assert call_args[0][0] == "product:1"
        assert json.loads(call_args[0][1]) == {"id": "1"}
        assert call_args[1]["expiry"] is expiry_set.return_value

    @pytest.mark.asyncio
    async def test_set_without_ttl(self, valkey_store):
        """Test that no expiry is sent when TTL is omitted."""
        valkey_store._client.set = AsyncMock(return_value="OK")

        await valkey_store.set("forever", [1])

        valkey_store._client.set.assert_called_once_with("forever", "[1]")

    @pytest.mark.asyncio
    async def test_set_non_positive_ttl_deletes(self, valkey_store):
        """Test that a zero TTL deletes the key instead of sending SET ... EX 0."""
        valkey_store._client.set = AsyncMock(return_value="OK")
        valkey_store._client.delete = AsyncMock(return_value=1)

        await valkey_store.set("product:1", {"id": "1"}, 0)

        valkey_store._client.set.assert_not_called()
        valkey_store._client.delete.assert_called_once_with(["product:1"])

    @pytest.mark.asyncio
    async def test_delete_by_pattern_rejects_globs(self, valkey_store):
        """Test that unsupported patterns never reach SCAN."""
        valkey_store._client.scan = AsyncMock(return_value=[b"0", []])

        assert await valkey_store.delete_by_pattern("product:search:[^a]*") == 0
        valkey_store._client.scan.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_connection_error(self, valkey_store):
        """Test that a failing SET is swallowed."""
        valkey_store._client.set = AsyncMock(side_effect=TimeoutError("timed out"))

        await valkey_store.set("product:1", {"id": "1"}, 600)  # Should not raise

    @pytest.mark.asyncio
    async def test_delete(self, valkey_store):
        """Test deleting a key."""
        valkey_store._client.delete = AsyncMock(return_value=0)

        await valkey_store.delete("product:1")

        valkey_store._client.delete.assert_called_once_with(["product:1"])

    @pytest.mark.asyncio
    async def test_delete_by_pattern_walks_cursor(self, valkey_store):
        """Test that pattern deletion follows SCAN cursors until 0."""
        valkey_store._client.scan = AsyncMock(
            side_effect=[
                [b"17", [b"product:search:watch", b"product:search:shirt"]],
                [b"0", [b"product:search:hat"]],
            ]
        )
        valkey_store._client.delete = AsyncMock(side_effect=[2, 1])

        removed = await valkey_store.delete_by_pattern("product:search:*")

        assert removed == 3
        assert valkey_store._client.scan.call_count == 2
        first_call = valkey_store._client.scan.call_args_list[0]
        assert first_call[0][0] == "0"
        assert first_call[1]["match"] == "product:search:*"
        second_call = valkey_store._client.scan.call_args_list[1]
        assert second_call[0][0] == b"17"

    @pytest.mark.asyncio
    async def test_delete_by_pattern_empty_batches(self, valkey_store):
        """Test that empty SCAN batches issue no DEL."""
        valkey_store._client.scan = AsyncMock(return_value=[b"0", []])
        valkey_store._client.delete = AsyncMock()

        assert await valkey_store.delete_by_pattern("product:search:*") == 0
        valkey_store._client.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_by_pattern_error(self, valkey_store):
        """Test that a failing sweep returns 0."""
        valkey_store._client.scan = AsyncMock(side_effect=ConnectionError("refused"))

        assert await valkey_store.delete_by_pattern("product:search:*") == 0

    @pytest.mark.asyncio
    async def test_key_prefix(self):
        """Test that the namespace prefix is applied to keys and patterns."""
        store = ValkeyCacheStore(key_prefix="shop:")
        store._client = AsyncMock()
        store._client.get = AsyncMock(return_value=None)
        store._client.scan = AsyncMock(return_value=[b"0", [b"shop:product:search:a"]])
        store._client.delete = AsyncMock(return_value=1)

        await store.get("product:1")
        await store.delete_by_pattern("product:search:*")

        store._client.get.assert_called_once_with("shop:product:1")
        assert store._client.scan.call_args[1]["match"] == "shop:product:search:*"
        store._client.delete.assert_called_once_with([b"shop:product:search:a"])

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, valkey_store):
        """Test health check with PONG reply."""
        valkey_store._client.ping = AsyncMock(return_value=b"PONG")

        assert await valkey_store.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self, valkey_store):
        """Test health check when PING raises."""
        valkey_store._client.ping = AsyncMock(side_effect=ConnectionError("refused"))

        assert await valkey_store.health_check() is False

    @pytest.mark.asyncio
    async def test_server_down(self):
        """Test that operations against an unreachable server degrade instead of raising."""
        store = ValkeyCacheStore()

        with patch(
            "storefront_cache.storage.valkey.GlideClient.create",
            new=AsyncMock(side_effect=ConnectionError("refused")),
        ):
            assert await store.get("k") is None
            await store.set("k", 1, 10)
            assert await store.delete_by_pattern("*") == 0
            assert await store.health_check() is False

    @pytest.mark.asyncio
    async def test_reconnects_after_failed_connect(self):
        """Test that a server down at startup is used once it comes back."""
        client = AsyncMock()
        client.ping = AsyncMock(return_value=b"PONG")
        client.get = AsyncMock(return_value=b'{"id": "1"}')
        create = AsyncMock(side_effect=[ConnectionError("refused"), client])
        store = ValkeyCacheStore()

        with patch("storefront_cache.storage.valkey.GlideClient.create", new=create):
            with pytest.raises(ConnectionError):
                await store.connect()

            assert await store.health_check() is True
            assert await store.get("product:1") == {"id": "1"}

        assert create.call_count == 2
        assert store._connected is True

    @pytest.mark.asyncio
    async def test_connect_is_idempotent(self, valkey_store):
        """Test that connect keeps an existing client."""
        client = valkey_store._client

        with patch("storefront_cache.storage.valkey.GlideClient.create", new=AsyncMock()) as create:
            await valkey_store.connect()

        create.assert_not_called()
        assert valkey_store._client is client

    @pytest.mark.asyncio
    async def test_clear_flushes_db(self, valkey_store):
        """Test clearing without prefix flushes the database."""
        valkey_store._client.flushdb = AsyncMock(return_value="OK")

        await valkey_store.clear()

        valkey_store._client.flushdb.assert_called_once()

    @pytest.mark.asyncio
    async def test_close(self, valkey_store):
        """Test closing the connection."""
        client = valkey_store._client

        await valkey_store.close()

        client.close.assert_called_once()
        assert valkey_store._client is None
