"""
Metadata Manager

Stores and loads the small record that says how many fragments make up the
cached value for a key prefix.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from ...domain.cache.repository_interfaces import CacheStore
from ...domain.cache.value_objects import CacheKey, MetadataRecord, TTL
from ...infrastructure.store.exceptions import StoreFailure

logger = structlog.get_logger()


def metadata_key(prefix: str) -> CacheKey:
    """Key of the metadata record for ``prefix``."""
    return CacheKey.metadata(prefix)


class MetadataManager:
    """Pass-through to the store with key derivation and record encoding."""

    def __init__(self, store: CacheStore):
        self.store = store

    async def store_meta(
        self,
        prefix: str,
        fragment_count: int,
        ttl: TTL,
        byte_length: Optional[int] = None,
        digest: Optional[str] = None,
    ) -> None:
        """
        Write the metadata record for ``prefix``.

        Raises:
            StoreFailure: If the write fails
        """
        record = MetadataRecord(
            fragment_count=fragment_count, byte_length=byte_length, digest=digest
        )
        await self.store.put(metadata_key(prefix), record.model_dump_json(), ttl)

    async def load_meta(self, prefix: str, ttl: TTL) -> Optional[MetadataRecord]:
        """
        Read the metadata record for ``prefix``.

        Store failures and unreadable records are reported as absent.
        """
        key = metadata_key(prefix)

        try:
            raw = await self.store.get(key, ttl)
        except StoreFailure as e:
            logger.warning(
                "Metadata: load failed, treating as absent",
                prefix=prefix,
                error=e.message,
                error_code=e.error_code,
            )
            return None

        if raw is None:
            return None

        try:
            return MetadataRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Metadata: record unreadable, treating as absent",
                prefix=prefix,
                key=key.value,
                error=str(e),
            )
            return None
