"""
Store Connection Factory

Builds the Redis client and the configured store adapter from settings.
"""

from typing import Optional
from urllib.parse import urlparse

import structlog
from redis.asyncio import ConnectionPool, Redis

from ...core.config import Settings, settings as default_settings
from ...domain.cache.repository_interfaces import CacheStore
from .exceptions import StoreConfigurationException
from .memory_store import InMemoryCacheStore
from .redis_store import RedisCacheStore

logger = structlog.get_logger()


def create_redis_client(config: Optional[Settings] = None) -> Redis:
    """
    Create a Redis client backed by a connection pool.

    Timeouts are left to the configured socket options; none are imposed
    by default.

    Raises:
        StoreConfigurationException: If the pool cannot be built from settings
    """
    config = config or default_settings
    parsed_url = urlparse(config.REDIS_URL)

    connection_kwargs = {
        "encoding": "utf-8",
        "decode_responses": True,
        "max_connections": config.REDIS_MAX_CONNECTIONS,
        "socket_timeout": config.REDIS_SOCKET_TIMEOUT,
        "socket_connect_timeout": config.REDIS_CONNECT_TIMEOUT,
    }

    try:
        pool = ConnectionPool.from_url(config.REDIS_URL, **connection_kwargs)
    except ValueError as e:
        raise StoreConfigurationException(
            message=f"Invalid Redis configuration: {e}",
            config_key="REDIS_URL",
            original_error=e,
        ) from e

    logger.info(
        "Redis connection pool created",
        host=parsed_url.hostname or "localhost",
        port=parsed_url.port or 6379,
        max_connections=config.REDIS_MAX_CONNECTIONS,
    )
    return Redis(connection_pool=pool)


def create_store(config: Optional[Settings] = None) -> CacheStore:
    """Create the store adapter selected by ``CACHE_BACKEND``."""
    config = config or default_settings

    if config.uses_redis:
        return RedisCacheStore(
            create_redis_client(config),
            namespace=config.CACHE_KEY_NAMESPACE,
            max_entry_bytes=config.CACHE_ENTRY_SIZE_LIMIT_BYTES,
        )

    return InMemoryCacheStore(
        namespace=config.CACHE_KEY_NAMESPACE,
        max_entry_bytes=config.CACHE_ENTRY_SIZE_LIMIT_BYTES,
    )
