"""
Payload Serializer

Converts payloads to and from their canonical JSON text. Encoding is
deterministic: keys are sorted and separators fixed, so equal values always
produce byte-identical text.
"""

import json
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from .exceptions import DecodeError, SerializationError

T = TypeVar("T")


class PayloadSerializer(Generic[T]):
    """
    JSON serializer for cached payloads.

    With ``payload_type`` set, payloads are converted through a pydantic
    ``TypeAdapter`` so models, dataclasses and typed containers survive the
    round trip. Without it, payloads must already be plain JSON values.

    Example:
        serializer = PayloadSerializer(list[Country])
        text = serializer.encode(countries)
        assert serializer.decode(text) == countries
    """

    def __init__(self, payload_type: Optional[Type[T]] = None):
        self.payload_type = payload_type
        self._adapter: Optional[TypeAdapter] = (
            TypeAdapter(payload_type) if payload_type is not None else None
        )

    def encode(self, payload: T) -> str:
        """
        Encode a payload to canonical text.

        Raises:
            SerializationError: If the payload is not representable as JSON
        """
        try:
            data: Any = payload
            if self._adapter is not None:
                data = self._adapter.dump_python(payload, mode="json")
            return json.dumps(
                data,
                sort_keys=True,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            # pydantic's serialization errors subclass ValueError
            raise SerializationError(
                message=f"Failed to encode payload: {e}", original_error=e
            ) from e

    def decode(self, text: str) -> T:
        """
        Decode canonical text back to a payload.

        Raises:
            DecodeError: If the text is empty, malformed or of the wrong shape
        """
        if not text:
            raise DecodeError(message="Cannot decode empty text", text_length=0)

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(
                message=f"Malformed payload text: {e.msg}",
                text_length=len(text),
                original_error=e,
            ) from e

        if self._adapter is None:
            return data

        try:
            return self._adapter.validate_python(data)
        except ValidationError as e:
            raise DecodeError(
                message="Decoded payload does not match the expected type",
                text_length=len(text),
                original_error=e,
            ) from e
