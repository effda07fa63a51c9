"""
Store Infrastructure Module

Adapters over the bounded-size persistent cache:
- RedisCacheStore: redis.asyncio backed store
- InMemoryCacheStore: process-local store for tests and development
- create_store / create_redis_client: construction from settings
"""

from .base import NamespacedCacheStore
from .connection_factory import create_redis_client, create_store
from .exceptions import EntryTooLargeError, StoreConfigurationException, StoreFailure
from .memory_store import InMemoryCacheStore
from .redis_store import RedisCacheStore

__all__ = [
    "NamespacedCacheStore",
    "RedisCacheStore",
    "InMemoryCacheStore",
    "create_store",
    "create_redis_client",
    "StoreFailure",
    "EntryTooLargeError",
    "StoreConfigurationException",
]
