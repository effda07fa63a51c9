"""
Cache Services

- ChunkedCache / create_chunked_cache: fragmenting read-through cache
- MetadataManager: fragment-count records per key prefix
"""

from .chunked_cache import ChunkedCache, create_chunked_cache
from .metadata_manager import MetadataManager, metadata_key

__all__ = ["ChunkedCache", "create_chunked_cache", "MetadataManager", "metadata_key"]
