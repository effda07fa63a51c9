"""
Cache Domain Module

Value objects, payload serialization, fragment splitting and the store
contract for the chunked cache.
"""

from .chunking import payload_digest, reassemble_fragments, split_text, utf8_size
from .exceptions import (
    ChunkedCacheException,
    DecodeError,
    ReassemblyFailure,
    SerializationError,
)
from .repository_interfaces import CacheStore
from .serializer import PayloadSerializer
from .value_objects import TTL, CacheKey, MetadataRecord

__all__ = [
    "CacheKey",
    "TTL",
    "MetadataRecord",
    "CacheStore",
    "PayloadSerializer",
    "split_text",
    "reassemble_fragments",
    "utf8_size",
    "payload_digest",
    "ChunkedCacheException",
    "DecodeError",
    "ReassemblyFailure",
    "SerializationError",
]
