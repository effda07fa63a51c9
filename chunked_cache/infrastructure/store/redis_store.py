"""
Redis Cache Store

Store adapter over a ``redis.asyncio`` client. Each call is a single
independent command; nothing is retried and no transaction spans keys.
"""

import time
from typing import Any, Dict, Optional, Union

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...domain.cache.value_objects import CacheKey, TTL
from .base import NamespacedCacheStore
from .exceptions import StoreFailure

logger = structlog.get_logger()

# Errors from the client or the socket underneath it
STORE_ERRORS = (RedisError, OSError)


class RedisCacheStore(NamespacedCacheStore):
    """
    Redis implementation of the cache store.

    Entries are written with ``SET key value EX ttl``. Values larger than
    ``max_entry_bytes`` are refused before reaching Redis.
    """

    def __init__(
        self,
        client: Redis,
        namespace: str = "chunked_cache",
        max_entry_bytes: int = 2 * 1024 * 1024,
    ):
        super().__init__(namespace, max_entry_bytes)
        self.client = client

    async def put(self, key: CacheKey, value: str, ttl: TTL) -> None:
        """Write one entry with expiry."""
        entry_key = self.entry_key(key, ttl)
        size = self._check_size(entry_key, value)
        start_time = time.time()

        try:
            await self.client.set(entry_key, value, ex=ttl.seconds)
        except STORE_ERRORS as e:
            logger.warning(
                "Redis store: put failed",
                key=entry_key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreFailure(
                message=f"Failed to write {entry_key}: {e}",
                operation="put",
                key=entry_key,
                original_error=e,
            ) from e

        logger.debug(
            "Redis store: entry written",
            key=entry_key,
            size_bytes=size,
            ttl_seconds=ttl.seconds,
            execution_time_ms=round((time.time() - start_time) * 1000, 2),
        )

    async def get(self, key: CacheKey, ttl: TTL) -> Optional[str]:
        """Read one entry; ``None`` when absent."""
        entry_key = self.entry_key(key, ttl)

        try:
            value = await self.client.get(entry_key)
        except STORE_ERRORS as e:
            logger.warning(
                "Redis store: get failed",
                key=entry_key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreFailure(
                message=f"Failed to read {entry_key}: {e}",
                operation="get",
                key=entry_key,
                original_error=e,
            ) from e

        return self._as_text(entry_key, value)

    async def delete(self, key: CacheKey, ttl: TTL) -> bool:
        """Delete one entry."""
        entry_key = self.entry_key(key, ttl)

        try:
            result = await self.client.delete(entry_key)
        except STORE_ERRORS as e:
            raise StoreFailure(
                message=f"Failed to delete {entry_key}: {e}",
                operation="delete",
                key=entry_key,
                original_error=e,
            ) from e

        return result > 0

    async def health_check(self) -> Dict[str, Any]:
        """Ping Redis and report latency."""
        try:
            start_time = time.time()
            await self.client.ping()
            response_time = time.time() - start_time
            return {
                "status": "healthy",
                "backend": "redis",
                "response_time_ms": round(response_time * 1000, 2),
            }
        except STORE_ERRORS as e:
            logger.error("Redis store: health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "backend": "redis",
                "error": str(e),
            }

    async def close(self) -> None:
        """Close the client and its connection pool."""
        await self.client.aclose()
        logger.info("Redis store closed")

    @staticmethod
    def _as_text(entry_key: str, value: Union[str, bytes, None]) -> Optional[str]:
        if value is None or isinstance(value, str):
            return value
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreFailure(
                message=f"Entry {entry_key} is not valid UTF-8",
                operation="get",
                key=entry_key,
                original_error=e,
            ) from e
