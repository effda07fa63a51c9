"""
Shared behaviour for store adapters: key namespacing and the entry ceiling.
"""

from ...domain.cache.chunking import utf8_size
from ...domain.cache.repository_interfaces import CacheStore
from ...domain.cache.value_objects import CacheKey, TTL
from .exceptions import EntryTooLargeError


class NamespacedCacheStore(CacheStore):
    """
    Base class for stores that scope keys by namespace and revalidation period.

    The physical key is ``{namespace}:{key}:{ttl_seconds}``, so entries written
    with a different revalidation period never mix.
    """

    def __init__(self, namespace: str, max_entry_bytes: int):
        if not namespace:
            raise ValueError("Store namespace cannot be empty")
        if max_entry_bytes <= 0:
            raise ValueError("max_entry_bytes must be positive")
        self.namespace = namespace
        self._max_entry_bytes = max_entry_bytes

    @property
    def max_entry_bytes(self) -> int:
        return self._max_entry_bytes

    def entry_key(self, key: CacheKey, ttl: TTL) -> str:
        """Physical key for a logical key and revalidation period."""
        return f"{self.namespace}:{key.value}:{ttl.seconds}"

    def _check_size(self, entry_key: str, value: str) -> int:
        size = utf8_size(value)
        if size > self._max_entry_bytes:
            raise EntryTooLargeError(entry_key, size, self._max_entry_bytes)
        return size
