"""
Cache Value Objects

Immutable value objects for the chunked cache domain.
Key derivation for metadata and fragment entries lives here so that
writers and readers always agree on entry names.
"""

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field


METADATA_SUFFIX = ":metadata"
FRAGMENT_INFIX = "::chunk"


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Keys are logical names; store adapters add their own namespace.
    """

    value: str

    def __post_init__(self) -> None:
        """Validate cache key format."""
        if not self.value:
            raise ValueError("Cache key cannot be empty")

    @classmethod
    def metadata(cls, prefix: str) -> "CacheKey":
        """Create the metadata key for a cache key prefix."""
        if not prefix:
            raise ValueError("Cache key prefix cannot be empty")
        return cls(f"{prefix}{METADATA_SUFFIX}")

    @classmethod
    def fragment(cls, prefix: str, index: int) -> "CacheKey":
        """Create the key of fragment ``index`` for a cache key prefix."""
        if not prefix:
            raise ValueError("Cache key prefix cannot be empty")
        if index < 0:
            raise ValueError("Fragment index cannot be negative")
        return cls(f"{prefix}{FRAGMENT_INFIX}{index}")

    @classmethod
    def fragments(cls, prefix: str, count: int) -> List["CacheKey"]:
        """Create the ordered fragment keys ``0..count-1``."""
        return [cls.fragment(prefix, index) for index in range(count)]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TTL:
    """
    Time To Live value object for cache expiration.

    The value is advisory for the backing store.
    """

    seconds: int

    def __post_init__(self) -> None:
        """Validate TTL value."""
        if self.seconds <= 0:
            raise ValueError("TTL must be positive")
        if self.seconds > 86400 * 365:  # Max 1 year
            raise ValueError("TTL too large (max 1 year)")

    @classmethod
    def from_seconds(cls, seconds: int) -> "TTL":
        """Create TTL from seconds."""
        return cls(seconds)

    @classmethod
    def from_minutes(cls, minutes: int) -> "TTL":
        """Create TTL from minutes."""
        return cls(minutes * 60)

    @classmethod
    def from_hours(cls, hours: int) -> "TTL":
        """Create TTL from hours."""
        return cls(hours * 3600)

    @classmethod
    def from_days(cls, days: int) -> "TTL":
        """Create TTL from days."""
        return cls(days * 86400)

    @classmethod
    def default(cls) -> "TTL":
        """Default revalidation period (1 hour)."""
        return cls.from_hours(1)

    def __str__(self) -> str:
        return f"{self.seconds}s"


class MetadataRecord(BaseModel):
    """Describes how many fragments were written for one cache key prefix."""

    fragment_count: int = Field(..., ge=0, description="Number of fragments written")
    byte_length: Optional[int] = Field(
        None, ge=0, description="UTF-8 size of the whole encoded payload"
    )
    digest: Optional[str] = Field(
        None,
        min_length=64,
        max_length=64,
        description="SHA-256 hex digest of the whole encoded payload",
    )
