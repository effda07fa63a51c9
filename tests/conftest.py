"""
Main pytest configuration for all tests.

Shared fixtures: in-memory stores, fault-injecting stores and counting
producers.
"""

import os

# Set test environment variables before importing library modules
os.environ["ENVIRONMENT"] = "test"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "DEBUG"

import asyncio
from typing import Any, Callable, Iterable, Optional

import pytest

from chunked_cache.domain.cache.value_objects import CacheKey, TTL
from chunked_cache.infrastructure.store.exceptions import StoreFailure
from chunked_cache.infrastructure.store.memory_store import InMemoryCacheStore

TEST_NAMESPACE = "test"
TEST_ENTRY_LIMIT = 1024
TEST_FRAGMENT_SIZE = 64


class CountingProducer:
    """Async producer that records calls and returns a new version each time."""

    def __init__(
        self,
        factory: Callable[[int], Any],
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.factory = factory
        self.error = error
        self.delay = delay
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.factory(self.calls)


class FlakyStore(InMemoryCacheStore):
    """In-memory store whose reads or writes fail for selected logical keys."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.failing_puts: set = set()
        self.failing_gets: set = set()
        self.fail_everything = False

    def fail_puts(self, keys: Iterable[CacheKey]) -> None:
        self.failing_puts.update(key.value for key in keys)

    def fail_gets(self, keys: Iterable[CacheKey]) -> None:
        self.failing_gets.update(key.value for key in keys)

    async def put(self, key: CacheKey, value: str, ttl: TTL) -> None:
        if self.fail_everything or key.value in self.failing_puts:
            raise StoreFailure(message="injected put failure", operation="put", key=key.value)
        await super().put(key, value, ttl)

    async def get(self, key: CacheKey, ttl: TTL) -> Optional[str]:
        if self.fail_everything or key.value in self.failing_gets:
            raise StoreFailure(message="injected get failure", operation="get", key=key.value)
        return await super().get(key, ttl)


def build_payload(version: int) -> dict:
    """Payload large enough to need many fragments at the test fragment size."""
    return {
        "version": version,
        "countries": [
            {"code": f"C{index:03d}", "name": f"Country {index}", "population": index * 1000}
            for index in range(20)
        ],
    }


@pytest.fixture
def ttl():
    """Default revalidation period used by the caches under test."""
    return TTL(3600)


@pytest.fixture
def memory_store():
    """Create an in-memory store with a small entry ceiling."""
    return InMemoryCacheStore(namespace=TEST_NAMESPACE, max_entry_bytes=TEST_ENTRY_LIMIT)


@pytest.fixture
def flaky_store():
    """Create an in-memory store with fault injection."""
    return FlakyStore(namespace=TEST_NAMESPACE, max_entry_bytes=TEST_ENTRY_LIMIT)


@pytest.fixture
def producer():
    """Producer returning a fresh multi-fragment payload per call."""
    return CountingProducer(build_payload)
