"""
Unit tests for MetadataManager.

Store failures and unreadable records must read as absent.
"""

import pytest

from chunked_cache.domain.cache.value_objects import CacheKey, MetadataRecord
from chunked_cache.infrastructure.store.exceptions import StoreFailure
from chunked_cache.services.cache.metadata_manager import MetadataManager, metadata_key


class TestMetadataManager:
    """Test MetadataManager service."""

    @pytest.fixture
    def manager(self, memory_store):
        return MetadataManager(memory_store)

    def test_metadata_key(self):
        assert metadata_key("countries") == CacheKey("countries:metadata")

    @pytest.mark.asyncio
    async def test_store_and_load(self, manager, ttl):
        """A stored record loads back unchanged."""
        await manager.store_meta("countries", 5, ttl, byte_length=300)

        record = await manager.load_meta("countries", ttl)
        assert record == MetadataRecord(fragment_count=5, byte_length=300)

    @pytest.mark.asyncio
    async def test_store_and_load_with_digest(self, manager, ttl):
        digest = "0" * 64
        await manager.store_meta("countries", 3, ttl, byte_length=150, digest=digest)

        record = await manager.load_meta("countries", ttl)
        assert record.digest == digest

    @pytest.mark.asyncio
    async def test_record_stored_under_metadata_key(self, manager, memory_store, ttl):
        """The record is a JSON entry under ``prefix:metadata``."""
        await manager.store_meta("countries", 2, ttl)

        raw = await memory_store.get(CacheKey("countries:metadata"), ttl)
        assert MetadataRecord.model_validate_json(raw).fragment_count == 2

    @pytest.mark.asyncio
    async def test_load_absent(self, manager, ttl):
        assert await manager.load_meta("unknown", ttl) is None

    @pytest.mark.asyncio
    async def test_load_garbled_record(self, manager, memory_store, ttl):
        """Unreadable records are absent, not errors."""
        await memory_store.put(CacheKey.metadata("countries"), "{not json", ttl)
        assert await manager.load_meta("countries", ttl) is None

    @pytest.mark.asyncio
    async def test_load_invalid_record(self, manager, memory_store, ttl):
        """Records failing validation are absent."""
        await memory_store.put(
            CacheKey.metadata("countries"), '{"fragment_count": -4}', ttl
        )
        assert await manager.load_meta("countries", ttl) is None

    @pytest.mark.asyncio
    async def test_load_store_failure(self, flaky_store, ttl):
        """A failing store read is absent."""
        manager = MetadataManager(flaky_store)
        await manager.store_meta("countries", 1, ttl)
        flaky_store.fail_gets([CacheKey.metadata("countries")])

        assert await manager.load_meta("countries", ttl) is None

    @pytest.mark.asyncio
    async def test_store_failure_raised(self, flaky_store, ttl):
        """Write failures are raised for the caller to log."""
        manager = MetadataManager(flaky_store)
        flaky_store.fail_puts([CacheKey.metadata("countries")])

        with pytest.raises(StoreFailure):
            await manager.store_meta("countries", 1, ttl)
