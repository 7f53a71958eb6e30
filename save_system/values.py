"""Storable value kinds and the typed conversions used by the accessors.

Only four kinds ever live in a save file: floats, integers, text and encoded
text arrays. The document keeps plain JSON scalars, so the array kind is only
known to the caller that wrote it (it is stored as text).

Numeric reads are lenient on purpose: a key written with one numeric accessor
may be read back with another. Floats are truncated toward zero, the same way
existing save files expect booleans (``1``/``0``) to be interpreted.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

StoredValue = Union[float, int, str]

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class ValueKind(str, Enum):
    FLOAT = "float"
    INT = "int"
    TEXT = "text"
    TEXT_ARRAY = "text_array"


def kind_of(raw: StoredValue, *, encoded_array: bool = False) -> ValueKind:
    """Classify a stored scalar.

    ``encoded_array`` marks text written by ``set_string_array``; storage alone
    cannot tell the two text kinds apart.
    """
    if isinstance(raw, bool) or isinstance(raw, int):
        return ValueKind.INT
    if isinstance(raw, float):
        return ValueKind.FLOAT
    if isinstance(raw, str):
        return ValueKind.TEXT_ARRAY if encoded_array else ValueKind.TEXT
    raise ValueError(f"not a storable value: {type(raw).__name__}")


def normalize_stored(raw: Any) -> StoredValue:
    """Return ``raw`` as a storable scalar or raise ``ValueError``.

    Booleans are stored numerically (``1``/``0``).
    """
    if isinstance(raw, bool):
        return 1 if raw else 0
    if isinstance(raw, (int, float, str)):
        return raw
    raise ValueError(f"unsupported value type {type(raw).__name__!r}; expected number or text")


def _to_integer(raw: StoredValue) -> int:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        # int() raises on nan/inf
        return int(raw)
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return int(text)
        except ValueError:
            return int(float(text))
    raise TypeError(f"cannot convert {type(raw).__name__} to an integer")


def _ranged_integer(raw: StoredValue, default: Any, lo: int, hi: int, label: str) -> Any:
    if raw is MISSING:
        return default
    try:
        value = _to_integer(raw)
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning("Stored value %r cannot be read as %s: %s", raw, label, e)
        return default
    if value < lo or value > hi:
        logger.warning("Stored value %r is out of range for %s", raw, label)
        return default
    return value


def as_float(raw: StoredValue, default: Any = 0.0) -> Any:
    if raw is MISSING:
        return default
    try:
        if isinstance(raw, (bool, int, float)):
            return float(raw)
        return float(str(raw).strip())
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning("Stored value %r cannot be read as float: %s", raw, e)
        return default


def as_int(raw: StoredValue, default: Any = 0) -> Any:
    return _ranged_integer(raw, default, INT32_MIN, INT32_MAX, "int")


def as_long(raw: StoredValue, default: Any = 0) -> Any:
    return _ranged_integer(raw, default, INT64_MIN, INT64_MAX, "long")


def as_text(raw: StoredValue, default: Optional[str] = None) -> Optional[str]:
    if raw is MISSING:
        return default
    if isinstance(raw, str):
        return raw
    logger.warning("Stored value %r is not text", raw)
    return default


def as_bool(raw: StoredValue, default: bool = False) -> bool:
    """True iff the numeric form truncates to ``1``."""
    if raw is MISSING:
        return default
    number = as_float(raw, None)
    if number is None or not math.isfinite(number):
        return default
    return int(number) == 1


__all__ = [
    "INT32_MAX",
    "INT32_MIN",
    "INT64_MAX",
    "INT64_MIN",
    "MISSING",
    "StoredValue",
    "ValueKind",
    "as_bool",
    "as_float",
    "as_int",
    "as_long",
    "as_text",
    "kind_of",
    "normalize_stored",
]
