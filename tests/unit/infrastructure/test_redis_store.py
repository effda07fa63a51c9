"""
Unit tests for RedisCacheStore.

The Redis client is mocked; every client error must surface as StoreFailure.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError

from chunked_cache.domain.cache.value_objects import CacheKey, TTL
from chunked_cache.infrastructure.store.exceptions import EntryTooLargeError, StoreFailure
from chunked_cache.infrastructure.store.redis_store import RedisCacheStore


class TestRedisCacheStore:
    """Test RedisCacheStore with a mocked client."""

    @pytest.fixture
    def mock_redis(self):
        """Create mock Redis client."""
        client = AsyncMock()
        client.set = AsyncMock(return_value=True)
        client.get = AsyncMock(return_value=None)
        client.delete = AsyncMock(return_value=1)
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock()
        return client

    @pytest.fixture
    def store(self, mock_redis):
        return RedisCacheStore(mock_redis, namespace="test", max_entry_bytes=16)

    @pytest.mark.asyncio
    async def test_put_sets_with_expiry(self, store, mock_redis, ttl):
        """Entries are written with SET ... EX ttl under the namespaced key."""
        await store.put(CacheKey("p::chunk0"), "fragment", ttl)

        mock_redis.set.assert_called_once_with("test:p::chunk0:3600", "fragment", ex=3600)

    @pytest.mark.asyncio
    async def test_put_too_large_never_reaches_redis(self, store, mock_redis, ttl):
        with pytest.raises(EntryTooLargeError):
            await store.put(CacheKey("a"), "x" * 17, ttl)

        mock_redis.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_put_failure(self, store, mock_redis, ttl):
        """Client errors become StoreFailure with the cause chained."""
        error = RedisConnectionError("connection refused")
        mock_redis.set.side_effect = error

        with pytest.raises(StoreFailure) as exc_info:
            await store.put(CacheKey("a"), "value", ttl)

        assert exc_info.value.__cause__ is error
        assert exc_info.value.details["operation"] == "put"
        assert exc_info.value.details["original_error_type"] == "ConnectionError"

    @pytest.mark.asyncio
    async def test_get_hit(self, store, mock_redis, ttl):
        mock_redis.get.return_value = "value"

        assert await store.get(CacheKey("a"), ttl) == "value"
        mock_redis.get.assert_called_once_with("test:a:3600")

    @pytest.mark.asyncio
    async def test_get_absent(self, store, ttl):
        assert await store.get(CacheKey("a"), ttl) is None

    @pytest.mark.asyncio
    async def test_get_bytes_reply_decoded(self, store, mock_redis, ttl):
        """Clients without decode_responses return bytes."""
        mock_redis.get.return_value = "€uro".encode("utf-8")
        assert await store.get(CacheKey("a"), ttl) == "€uro"

    @pytest.mark.asyncio
    async def test_get_invalid_bytes(self, store, mock_redis, ttl):
        mock_redis.get.return_value = b"\xff\xfe"
        with pytest.raises(StoreFailure, match="not valid UTF-8"):
            await store.get(CacheKey("a"), ttl)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [RedisTimeoutError("timeout"), RedisError("boom"), OSError("reset")]
    )
    async def test_get_failure(self, store, mock_redis, ttl, error):
        mock_redis.get.side_effect = error

        with pytest.raises(StoreFailure) as exc_info:
            await store.get(CacheKey("a"), ttl)

        assert exc_info.value.error_code == "STORE_FAILURE"
        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_delete(self, store, mock_redis, ttl):
        assert await store.delete(CacheKey("a"), ttl) is True
        mock_redis.delete.assert_called_once_with("test:a:3600")

        mock_redis.delete.return_value = 0
        assert await store.delete(CacheKey("a"), ttl) is False

    @pytest.mark.asyncio
    async def test_delete_failure(self, store, mock_redis, ttl):
        mock_redis.delete.side_effect = RedisError("boom")
        with pytest.raises(StoreFailure):
            await store.delete(CacheKey("a"), ttl)

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, store):
        health = await store.health_check()

        assert health["status"] == "healthy"
        assert health["backend"] == "redis"
        assert "response_time_ms" in health

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self, store, mock_redis):
        mock_redis.ping.side_effect = RedisConnectionError("down")
        health = await store.health_check()

        assert health["status"] == "unhealthy"
        assert "down" in health["error"]

    @pytest.mark.asyncio
    async def test_close(self, store, mock_redis):
        await store.close()
        mock_redis.aclose.assert_called_once()

    def test_max_entry_bytes(self, store):
        assert store.max_entry_bytes == 16
        assert store.entry_key(CacheKey("a"), TTL(60)) == "test:a:60"
