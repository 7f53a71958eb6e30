"""Persistent key-value save data with migration from legacy preferences."""

from .config import SaveConfig
from .events import ResetRegistry, SaveEvents, SaveResettable
from .legacy import JsonLegacyPreferences, LegacyPreferences, NullLegacyPreferences
from .manager import LifecycleState, SaveManager, open_save_manager
from .string_array import (
    StringArrayDecodeError,
    StringArrayEncodeError,
    decode_string_array,
    encode_string_array,
)

__all__ = [
    "JsonLegacyPreferences",
    "LegacyPreferences",
    "LifecycleState",
    "NullLegacyPreferences",
    "ResetRegistry",
    "SaveConfig",
    "SaveEvents",
    "SaveManager",
    "SaveResettable",
    "StringArrayDecodeError",
    "StringArrayEncodeError",
    "decode_string_array",
    "encode_string_array",
    "open_save_manager",
]
