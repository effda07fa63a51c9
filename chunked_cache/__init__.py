"""
Chunked Cache - cache arbitrarily large payloads in a size-bounded store.

A payload is encoded to canonical JSON, split into fragments below the
store's per-entry ceiling, and written as independent entries next to a
metadata record holding the fragment count. Reads fetch every fragment
concurrently and fall back to the producer whenever anything is missing
or fails to decode.

Main components:
- create_chunked_cache / ChunkedCache: public entry point
- PayloadSerializer: deterministic JSON encoding
- split_text / reassemble_fragments: UTF-8 aware fragmenting
- RedisCacheStore / InMemoryCacheStore: store adapters
"""

from .core.config import Settings, get_settings, settings
from .core.logging import configure_logging
from .domain.cache import (
    TTL,
    CacheKey,
    CacheStore,
    ChunkedCacheException,
    DecodeError,
    MetadataRecord,
    PayloadSerializer,
    ReassemblyFailure,
    SerializationError,
    payload_digest,
    reassemble_fragments,
    split_text,
    utf8_size,
)
from .infrastructure.store import (
    EntryTooLargeError,
    InMemoryCacheStore,
    RedisCacheStore,
    StoreConfigurationException,
    StoreFailure,
    create_redis_client,
    create_store,
)
from .services.cache import ChunkedCache, MetadataManager, create_chunked_cache

__version__ = "0.1.0"

__all__ = [
    # Entry point
    "create_chunked_cache",
    "ChunkedCache",
    "MetadataManager",
    # Domain
    "CacheKey",
    "TTL",
    "MetadataRecord",
    "CacheStore",
    "PayloadSerializer",
    "split_text",
    "reassemble_fragments",
    "utf8_size",
    "payload_digest",
    # Stores
    "RedisCacheStore",
    "InMemoryCacheStore",
    "create_store",
    "create_redis_client",
    # Exceptions
    "ChunkedCacheException",
    "DecodeError",
    "ReassemblyFailure",
    "SerializationError",
    "StoreFailure",
    "EntryTooLargeError",
    "StoreConfigurationException",
    # Config
    "Settings",
    "get_settings",
    "settings",
    "configure_logging",
]
