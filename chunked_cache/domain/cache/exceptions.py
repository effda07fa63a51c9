"""
Cache Domain Exceptions

Domain-specific exceptions for payload encoding and fragment reassembly.
Every exception keeps the original error as ``__cause__``.
"""

from typing import Optional, Any, Dict


class ChunkedCacheException(Exception):
    """Base exception for chunked cache errors.

    Carries a machine readable ``error_code`` and structured ``details``
    suitable for log events.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class SerializationError(ChunkedCacheException):
    """Raised when a payload cannot be encoded to its canonical text."""

    def __init__(
        self,
        message: str = "Payload could not be encoded",
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="PAYLOAD_ENCODE_ERROR", details=details
        )
        if original_error:
            self.__cause__ = original_error


class DecodeError(ChunkedCacheException):
    """Raised when text is not a well-formed encoding of the expected payload."""

    def __init__(
        self,
        message: str = "Payload could not be decoded",
        text_length: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if text_length is not None:
            details["text_length"] = text_length
        if original_error:
            details["original_error"] = str(original_error)
            details["original_error_type"] = type(original_error).__name__

        super().__init__(
            message=message, error_code="PAYLOAD_DECODE_ERROR", details=details
        )
        if original_error:
            self.__cause__ = original_error


class ReassemblyFailure(ChunkedCacheException):
    """Raised when retrieved fragments cannot form the original encoding."""

    def __init__(
        self,
        message: str = "Fragments could not be reassembled",
        missing_indexes: Optional[list] = None,
        expected_bytes: Optional[int] = None,
        actual_bytes: Optional[int] = None,
    ):
        details: Dict[str, Any] = {}
        if missing_indexes:
            details["missing_indexes"] = missing_indexes
        if expected_bytes is not None:
            details["expected_bytes"] = expected_bytes
        if actual_bytes is not None:
            details["actual_bytes"] = actual_bytes

        super().__init__(
            message=message, error_code="FRAGMENT_REASSEMBLY_ERROR", details=details
        )
