"""
Fragment splitting and reassembly.

KEY CONCEPT: Fragments
The backing store only accepts entries below a fixed size, so an encoded
payload is cut into ordered fragments and each fragment becomes its own entry.

Sizes are counted in UTF-8 bytes, the same unit the store uses for its
ceiling. A cut never lands inside a multi-byte character:

    "ab€" with max_bytes=4  ->  ["ab", "€"]   (€ is 3 bytes)
"""

import hashlib
from typing import List, Optional, Sequence

from .exceptions import ReassemblyFailure

# Longest UTF-8 encoded character
MIN_FRAGMENT_BYTES = 4


def utf8_size(text: str) -> int:
    """Size of ``text`` in UTF-8 bytes."""
    return len(text.encode("utf-8"))


def payload_digest(text: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoding of ``text``."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _is_continuation_byte(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def split_text(text: str, max_bytes: int) -> List[str]:
    """
    Split text into fragments of at most ``max_bytes`` UTF-8 bytes.

    Args:
        text: Encoded payload text
        max_bytes: Maximum UTF-8 size of each fragment

    Returns:
        Ordered fragments whose concatenation equals ``text``.
        Empty text gives no fragments.
    """
    if max_bytes < MIN_FRAGMENT_BYTES:
        raise ValueError(
            f"max_bytes must be at least {MIN_FRAGMENT_BYTES}, got {max_bytes}"
        )

    data = text.encode("utf-8")
    fragments = []
    start = 0

    while start < len(data):
        end = min(start + max_bytes, len(data))
        # Back off to a character boundary
        while end < len(data) and _is_continuation_byte(data[end]):
            end -= 1
        fragments.append(data[start:end].decode("utf-8"))
        start = end

    return fragments


def reassemble_fragments(fragments: Sequence[Optional[str]]) -> str:
    """
    Concatenate fragments in index order.

    Raises:
        ReassemblyFailure: If any fragment is missing (``None``)
    """
    missing = [index for index, fragment in enumerate(fragments) if fragment is None]
    if missing:
        raise ReassemblyFailure(
            message=f"{len(missing)} of {len(fragments)} fragments missing",
            missing_indexes=missing,
        )
    return "".join(fragments)
