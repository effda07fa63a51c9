"""
Store Infrastructure Exceptions

Exceptions raised by store adapters. Client errors are always wrapped in
``StoreFailure`` with the original error chained; callers treat them as
an absent entry.
"""

from typing import Optional, Any

from ...domain.cache.exceptions import ChunkedCacheException


class StoreFailure(ChunkedCacheException):
    """Raised when a call to the backing store fails."""

    def __init__(
        self,
        message: str = "Store operation failed",
        operation: Optional[str] = None,
        key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        error_code: str = "STORE_FAILURE",
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if key:
            details["key"] = key
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(message=message, error_code=error_code, details=details)
        # Preserve exception context for debugging (exception chaining)
        if original_error:
            self.__cause__ = original_error


class EntryTooLargeError(StoreFailure):
    """Raised when a value exceeds the store's per-entry size ceiling."""

    def __init__(self, key: str, size_bytes: int, limit_bytes: int):
        super().__init__(
            message=f"Entry {key} is {size_bytes} bytes, limit is {limit_bytes}",
            operation="put",
            key=key,
            error_code="STORE_ENTRY_TOO_LARGE",
        )
        self.details.update({"size_bytes": size_bytes, "limit_bytes": limit_bytes})


class StoreConfigurationException(StoreFailure):
    """Raised when store configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            original_error=original_error,
            error_code="STORE_CONFIGURATION_ERROR",
        )
        if config_key:
            self.details["config_key"] = config_key
        if config_value is not None:
            self.details["config_value"] = str(config_value)
