"""Compact text encoding for arrays of short strings.

Layout::

    base64(<one length byte per element>) + "|" + "".join(elements)

Element boundaries come from the length table alone, so elements may contain
``|`` themselves. Every element must be at most 255 characters long.
"""

from __future__ import annotations

import base64
import binascii
from typing import List, Optional, Sequence

SEPARATOR = "|"
MAX_ELEMENT_LENGTH = 255

# Shorter length prefixes are rejected unconditionally. Existing save files
# rely on this boundary, keep it as is.
MIN_SEPARATOR_INDEX = 4


class StringArrayEncodeError(ValueError):
    """Raised when an array cannot be encoded."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


class StringArrayDecodeError(ValueError):
    """Raised for malformed or truncated encodings."""


def encode_string_array(values: Sequence[Optional[str]]) -> str:
    lengths = bytearray()
    for i, value in enumerate(values):
        if value is None:
            raise StringArrayEncodeError(f"element {i} is None; null entries cannot be saved", index=i)
        if not isinstance(value, str):
            raise StringArrayEncodeError(f"element {i} is {type(value).__name__}, not text", index=i)
        # Lengths are code points. Files written with UTF-16 unit lengths differ
        # for characters outside the BMP.
        if len(value) > MAX_ELEMENT_LENGTH:
            raise StringArrayEncodeError(
                f"element {i} is {len(value)} characters long (max {MAX_ELEMENT_LENGTH})",
                index=i,
            )
        lengths.append(len(value))

    prefix = base64.b64encode(bytes(lengths)).decode("ascii")
    return prefix + SEPARATOR + "".join(values)  # type: ignore[arg-type]


def decode_string_array(text: str) -> List[str]:
    if not isinstance(text, str):
        raise StringArrayDecodeError(f"encoded array must be text, got {type(text).__name__}")

    sep = text.find(SEPARATOR)
    if sep < MIN_SEPARATOR_INDEX:
        raise StringArrayDecodeError(f"length prefix too short (separator at index {sep})")

    try:
        lengths = base64.b64decode(text[:sep], validate=True)
    except (binascii.Error, ValueError) as e:
        raise StringArrayDecodeError(f"length prefix is not valid base64: {e}") from e

    body = text[sep + 1 :]
    if sum(lengths) != len(body):
        raise StringArrayDecodeError(
            f"declared lengths total {sum(lengths)} characters but {len(body)} follow the separator"
        )

    out: List[str] = []
    pos = 0
    for n in lengths:
        out.append(body[pos : pos + n])
        pos += n
    return out


__all__ = [
    "MAX_ELEMENT_LENGTH",
    "SEPARATOR",
    "StringArrayDecodeError",
    "StringArrayEncodeError",
    "decode_string_array",
    "encode_string_array",
]
