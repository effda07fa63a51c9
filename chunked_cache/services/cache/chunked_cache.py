"""
Chunked Cache Service

Caches payloads larger than the store's per-entry ceiling by splitting the
encoded payload into fragments plus one metadata record.

Read path:  metadata -> all fragments in parallel -> reassemble -> decode
Miss path:  producer -> encode -> split -> metadata + fragments in parallel

Entries expire independently, so any fragment or the metadata record may be
gone at read time. Anything short of a complete, decodable set of fragments
is a miss; a partial payload is never returned.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Generic, List, Optional, Type, TypeVar, Union

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ...core.config import settings
from ...domain.cache.chunking import (
    MIN_FRAGMENT_BYTES,
    payload_digest,
    reassemble_fragments,
    split_text,
    utf8_size,
)
from ...domain.cache.exceptions import DecodeError, ReassemblyFailure
from ...domain.cache.repository_interfaces import CacheStore
from ...domain.cache.serializer import PayloadSerializer
from ...domain.cache.value_objects import CacheKey, MetadataRecord, TTL
from ...infrastructure.store.connection_factory import create_store
from ...infrastructure.store.exceptions import StoreFailure
from .metadata_manager import MetadataManager, metadata_key

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

Producer = Callable[[], Union[T, Awaitable[T]]]

# Marks a cache miss; None is a valid cached payload
_MISS = object()


class ChunkedCache(Generic[T]):
    """
    Fragmenting read-through cache for one key prefix.

    The store is injected; the cache keeps no copy of the payload between
    calls and every ``get()`` round-trips through the store.

    Example:
        cache = ChunkedCache("countries", fetch_countries, store)
        countries = await cache.get()
    """

    def __init__(
        self,
        prefix: str,
        producer: Producer,
        store: CacheStore,
        revalidate_seconds: Optional[int] = None,
        fragment_size_bytes: Optional[int] = None,
        serializer: Optional[PayloadSerializer[T]] = None,
        deduplicate_misses: bool = False,
    ):
        if not prefix:
            raise ValueError("Cache key prefix cannot be empty")

        fragment_size = fragment_size_bytes
        if fragment_size is None:
            fragment_size = settings.CACHE_FRAGMENT_SIZE_BYTES
        if fragment_size < MIN_FRAGMENT_BYTES:
            raise ValueError(
                f"fragment_size_bytes must be at least {MIN_FRAGMENT_BYTES}"
            )
        if fragment_size >= store.max_entry_bytes:
            raise ValueError(
                f"fragment_size_bytes ({fragment_size}) must be smaller than the "
                f"store entry limit ({store.max_entry_bytes})"
            )

        if revalidate_seconds is None:
            revalidate_seconds = settings.CACHE_DEFAULT_REVALIDATE_SECONDS

        self._prefix = prefix
        self._producer = producer
        self._store = store
        self._ttl = TTL(revalidate_seconds)
        self._fragment_size_bytes = fragment_size
        self._serializer: PayloadSerializer[T] = serializer or PayloadSerializer()
        self._metadata = MetadataManager(store)
        self._deduplicate_misses = deduplicate_misses
        self._in_flight: Optional[asyncio.Future] = None

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def revalidate_seconds(self) -> int:
        return self._ttl.seconds

    @property
    def fragment_size_bytes(self) -> int:
        return self._fragment_size_bytes

    async def get(self) -> T:
        """
        Return the cached payload, producing and storing it on a miss.

        Raises:
            Exception: Whatever the producer raises, unchanged
        """
        with tracer.start_as_current_span("chunked_cache.get") as span:
            span.set_attribute("chunked_cache.prefix", self._prefix)

            cached = await self._retrieve_from_cache()
            if cached is not _MISS:
                span.set_attribute("chunked_cache.hit", True)
                return cached

            span.set_attribute("chunked_cache.hit", False)
            try:
                return await self._refresh()
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

    async def _retrieve_from_cache(self):
        metadata = await self._metadata.load_meta(self._prefix, self._ttl)
        if metadata is None:
            self._log_miss("metadata_absent")
            return _MISS

        try:
            self._validate_fragment_count(metadata)
        except ReassemblyFailure as e:
            self._log_miss(
                "validation_failed",
                error=e.message,
                fragment_count=metadata.fragment_count,
                **e.details,
            )
            return _MISS

        fragments = await self._retrieve_fragments(metadata.fragment_count)

        try:
            text = reassemble_fragments(fragments)
            self._validate_content(text, metadata)
            payload = self._serializer.decode(text)
        except ReassemblyFailure as e:
            reason = "fragment_absent" if "missing_indexes" in e.details else "validation_failed"
            self._log_miss(reason, error=e.message, **e.details)
            return _MISS
        except DecodeError as e:
            self._log_miss("validation_failed", error=e.message)
            return _MISS

        logger.info(
            "chunked_cache.hit",
            prefix=self._prefix,
            fragment_count=metadata.fragment_count,
        )
        return payload

    async def _retrieve_fragments(self, count: int) -> List[Optional[str]]:
        """Fetch fragments ``0..count-1`` concurrently, in index order."""
        keys = CacheKey.fragments(self._prefix, count)

        with tracer.start_as_current_span("chunked_cache.retrieve_fragments") as span:
            span.set_attribute("chunked_cache.fragment_count", count)
            # gather keeps positional order regardless of completion order
            return list(await asyncio.gather(*(self._retrieve_fragment(key) for key in keys)))

    async def _retrieve_fragment(self, key: CacheKey) -> Optional[str]:
        try:
            return await self._store.get(key, self._ttl)
        except StoreFailure as e:
            logger.warning(
                "chunked_cache.fragment_read_failed",
                prefix=self._prefix,
                key=key.value,
                error=e.message,
            )
            return None

    def _validate_fragment_count(self, metadata: MetadataRecord) -> None:
        """
        Reject counts that no write could have produced for the recorded size.

        Every fragment holds at least one byte and at most one store entry.
        """
        if metadata.byte_length is None:
            return
        count = metadata.fragment_count
        fewest = -(-metadata.byte_length // self._store.max_entry_bytes)
        if count > metadata.byte_length or count < fewest:
            raise ReassemblyFailure(
                message=(
                    f"{count} fragments cannot hold {metadata.byte_length} bytes"
                ),
                expected_bytes=metadata.byte_length,
            )

    @staticmethod
    def _validate_content(text: str, metadata: MetadataRecord) -> None:
        """Reassembled text must match the recorded size and digest."""
        if metadata.byte_length is not None:
            actual = utf8_size(text)
            if actual != metadata.byte_length:
                raise ReassemblyFailure(
                    message="Reassembled text does not match the recorded size",
                    expected_bytes=metadata.byte_length,
                    actual_bytes=actual,
                )
        # Fragments from two writes of equal size only differ in content
        if metadata.digest is not None and payload_digest(text) != metadata.digest:
            raise ReassemblyFailure(
                message="Reassembled text does not match the recorded digest"
            )

    async def _refresh(self) -> T:
        if not self._deduplicate_misses:
            return await self._produce_and_store()

        task = self._in_flight
        if task is None:
            task = asyncio.ensure_future(self._produce_and_store())
            self._in_flight = task
            task.add_done_callback(self._clear_in_flight)
        # One caller's cancellation must not cancel the shared refresh
        return await asyncio.shield(task)

    def _clear_in_flight(self, task: asyncio.Future) -> None:
        if self._in_flight is task:
            self._in_flight = None
        # Waiters may all be gone; mark a failure as retrieved
        if not task.cancelled():
            task.exception()

    async def _produce_and_store(self) -> T:
        logger.info("chunked_cache.produce", prefix=self._prefix)

        payload = self._producer()
        if inspect.isawaitable(payload):
            payload = await payload

        await self._store_in_cache(payload)
        return payload

    async def _store_in_cache(self, payload: T) -> None:
        """Write metadata and fragments; failures are logged, never raised."""
        with tracer.start_as_current_span("chunked_cache.store_fragments") as span:
            try:
                text = self._serializer.encode(payload)
                fragments = split_text(text, self._fragment_size_bytes)
            except Exception as e:
                logger.error(
                    "chunked_cache.store_skipped",
                    prefix=self._prefix,
                    error=str(e),
                    exc_info=True,
                )
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return

            byte_length = utf8_size(text)
            span.set_attribute("chunked_cache.fragment_count", len(fragments))
            span.set_attribute("chunked_cache.size_bytes", byte_length)

            logger.info(
                "chunked_cache.store",
                prefix=self._prefix,
                fragment_count=len(fragments),
                size_mb=round(byte_length / (1024 * 1024), 2),
            )

            fragment_keys = CacheKey.fragments(self._prefix, len(fragments))
            labels = [metadata_key(self._prefix).value] + [key.value for key in fragment_keys]
            writes = [
                self._metadata.store_meta(
                    self._prefix,
                    len(fragments),
                    self._ttl,
                    byte_length=byte_length,
                    digest=payload_digest(text),
                )
            ] + [
                self._store.put(key, fragment, self._ttl)
                for key, fragment in zip(fragment_keys, fragments)
            ]

            results = await asyncio.gather(*writes, return_exceptions=True)

            failed = 0
            for label, result in zip(labels, results):
                if isinstance(result, Exception):
                    failed += 1
                    logger.warning(
                        "chunked_cache.store_partial_failure",
                        prefix=self._prefix,
                        key=label,
                        error=str(result),
                        error_type=type(result).__name__,
                    )
                elif isinstance(result, BaseException):
                    raise result

            if failed:
                span.set_attribute("chunked_cache.failed_writes", failed)

    def _log_miss(self, reason: str, **details) -> None:
        logger.info(
            "chunked_cache.miss",
            prefix=self._prefix,
            reason=reason,
            **details,
        )


def create_chunked_cache(
    cache_key_prefix: str,
    producer: Producer,
    revalidate_seconds: Optional[int] = None,
    *,
    store: Optional[CacheStore] = None,
    payload_type: Optional[Type[T]] = None,
    fragment_size_bytes: Optional[int] = None,
    deduplicate_misses: bool = False,
) -> ChunkedCache[T]:
    """
    Create a chunked cache for one key prefix.

    Args:
        cache_key_prefix: Identifier scoping the cached value
        producer: Zero-argument callable (sync or async) returning the payload
        revalidate_seconds: Entry expiry, defaults to
            ``settings.CACHE_DEFAULT_REVALIDATE_SECONDS`` (3600)
        store: Store adapter; built from settings when omitted
        payload_type: Type used to validate decoded payloads
        fragment_size_bytes: Fragment bound, defaults to
            ``settings.CACHE_FRAGMENT_SIZE_BYTES``
        deduplicate_misses: Share one producer call between concurrent
            misses on this instance

    Returns:
        ChunkedCache exposing ``get()``
    """
    if store is None:
        store = create_store()

    return ChunkedCache(
        cache_key_prefix,
        producer,
        store,
        revalidate_seconds=revalidate_seconds,
        fragment_size_bytes=fragment_size_bytes,
        serializer=PayloadSerializer(payload_type),
        deduplicate_misses=deduplicate_misses,
    )
