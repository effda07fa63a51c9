"""
In-Memory Cache Store

Process-local store with per-key expiry and the same per-entry size ceiling
as the external store. Used for tests and local development.
"""

import time
from typing import Any, Dict, Optional, Tuple

import structlog

from ...domain.cache.value_objects import CacheKey, TTL
from .base import NamespacedCacheStore

logger = structlog.get_logger()


class InMemoryCacheStore(NamespacedCacheStore):
    """
    Dictionary-backed store.

    Expired entries are dropped lazily when read. Values are held as text,
    exactly as an external store would hold them.

    Example:
        store = InMemoryCacheStore(max_entry_bytes=2 * 1024 * 1024)
        await store.put(CacheKey("a"), "value", TTL.default())
    """

    def __init__(self, namespace: str = "chunked_cache", max_entry_bytes: int = 2 * 1024 * 1024):
        super().__init__(namespace, max_entry_bytes)
        self._entries: Dict[str, Tuple[str, float]] = {}  # key -> (value, expires_at)

    async def put(self, key: CacheKey, value: str, ttl: TTL) -> None:
        entry_key = self.entry_key(key, ttl)
        size = self._check_size(entry_key, value)
        self._entries[entry_key] = (value, time.monotonic() + ttl.seconds)
        logger.debug("Store: entry written", key=entry_key, size_bytes=size)

    async def get(self, key: CacheKey, ttl: TTL) -> Optional[str]:
        entry_key = self.entry_key(key, ttl)
        entry = self._entries.get(entry_key)
        if entry is None:
            return None

        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[entry_key]
            return None
        return value

    async def delete(self, key: CacheKey, ttl: TTL) -> bool:
        return self._entries.pop(self.entry_key(key, ttl), None) is not None

    async def health_check(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "backend": "memory",
            "entries": len(self._entries),
            "response_time_ms": 0.0,
        }

    async def close(self) -> None:
        self._entries.clear()

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
