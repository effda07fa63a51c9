"""
Cache Store Interface

Abstract contract for the bounded-size key/value store that holds metadata
records and fragments. Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .value_objects import CacheKey, TTL


class CacheStore(ABC):
    """
    Abstract store for independent, size-bounded cache entries.

    Every call is independent: there are no multi-key transactions.
    An absent entry may have never been written, expired, or been evicted;
    callers cannot tell these apart.
    """

    @property
    @abstractmethod
    def max_entry_bytes(self) -> int:
        """Largest UTF-8 value size a single entry accepts."""
        pass

    @abstractmethod
    async def put(self, key: CacheKey, value: str, ttl: TTL) -> None:
        """Write one entry. Raises StoreFailure on any store error."""
        pass

    @abstractmethod
    async def get(self, key: CacheKey, ttl: TTL) -> Optional[str]:
        """Read one entry, ``None`` when absent. Raises StoreFailure on error."""
        pass

    @abstractmethod
    async def delete(self, key: CacheKey, ttl: TTL) -> bool:
        """Delete one entry. Returns True if an entry was removed."""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Report store health. Never raises."""
        pass

    async def close(self) -> None:
        """Release store resources."""
        return None
