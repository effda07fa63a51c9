"""
Chunked Cache Configuration

Configuration management with environment variable support.
Implements defaults and validation for store, chunking and logging settings.
"""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Library settings with validation and safe defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Runtime environment"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(
        default=False, description="Render log events as JSON instead of console text"
    )

    # Store backend selection
    CACHE_BACKEND: str = Field(
        default="memory", description="Backing store: 'memory' or 'redis'"
    )

    # Redis configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379", description="Redis connection URL"
    )
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_SOCKET_TIMEOUT: Optional[float] = Field(
        default=None, gt=0, description="Redis socket timeout in seconds (none by default)"
    )
    REDIS_CONNECT_TIMEOUT: Optional[float] = Field(
        default=None, gt=0, description="Redis connect timeout in seconds (none by default)"
    )

    # Chunking configuration
    CACHE_KEY_NAMESPACE: str = Field(
        default="chunked_cache", min_length=1, description="Prefix for every stored key"
    )
    CACHE_FRAGMENT_SIZE_BYTES: int = Field(
        default=1_500_000, ge=4, description="Maximum UTF-8 size of one fragment"
    )
    CACHE_ENTRY_SIZE_LIMIT_BYTES: int = Field(
        default=2 * 1024 * 1024,
        ge=5,
        description="Per-entry size ceiling enforced by the backing store",
    )
    CACHE_DEFAULT_REVALIDATE_SECONDS: int = Field(
        default=3600,
        ge=1,
        le=86400 * 365,
        description="Default expiry for metadata and fragments",
    )

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @field_validator("CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v):
        """Validate backing store name."""
        allowed = ["memory", "redis"]
        if v.lower() not in allowed:
            raise ValueError(f"CACHE_BACKEND must be one of: {allowed}")
        return v.lower()

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("REDIS_URL must be a redis://, rediss:// or unix:// URL")
        return v

    @model_validator(mode="after")
    def validate_fragment_headroom(self) -> "Settings":
        """Fragments must leave headroom below the store's entry ceiling."""
        if self.CACHE_FRAGMENT_SIZE_BYTES >= self.CACHE_ENTRY_SIZE_LIMIT_BYTES:
            raise ValueError(
                "CACHE_FRAGMENT_SIZE_BYTES must be strictly smaller than "
                "CACHE_ENTRY_SIZE_LIMIT_BYTES"
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def uses_redis(self) -> bool:
        return self.CACHE_BACKEND == "redis"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Create global settings instance
settings = get_settings()
