"""Typed save-data access and the save file lifecycle.

``SaveManager`` owns the in-memory store for one installation. Every setter
writes the whole store back to disk immediately; there is no batching. Keys
missing from the store are looked up in the legacy preferences and, when found
there, copied over on first read.

Nothing here raises for I/O or data problems: failures are logged and callers
see the getter's default (or ``False`` from the operations that report status).
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from .config import SaveConfig
from .events import ResetRegistry, SaveEvents
from .legacy import JsonLegacyPreferences, LegacyPreferences, NullLegacyPreferences
from .persistence import SaveDataError, SaveFile, deserialize, serialize
from .store import SaveStore
from .string_array import (
    StringArrayDecodeError,
    StringArrayEncodeError,
    decode_string_array,
    encode_string_array,
)
from .values import MISSING, as_bool, as_float, as_int, as_long, as_text

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    RESETTING = "resetting"
    CLOSED = "closed"


class SaveManager:
    def __init__(
        self,
        config: Optional[SaveConfig] = None,
        legacy: Optional[LegacyPreferences] = None,
        events: Optional[SaveEvents] = None,
        resettables: Optional[ResetRegistry] = None,
        autoload: bool = True,
    ) -> None:
        self.config = config if config is not None else SaveConfig.from_env()
        self.legacy: LegacyPreferences = legacy if legacy is not None else NullLegacyPreferences()
        self.events = events if events is not None else SaveEvents()
        self.resettables = resettables if resettables is not None else ResetRegistry()
        # injected hubs may be shared with other managers
        self._owns_events = events is None
        self._owns_resettables = resettables is None
        self.state = LifecycleState.UNINITIALIZED

        self._store = SaveStore()
        self._file = SaveFile(self.config.save_path())

        if autoload:
            self.load()

    @property
    def save_path(self) -> Path:
        return self._file.path

    # Lifecycle ----------------------------------------------------------
    def _check_open(self) -> None:
        if self.state is LifecycleState.CLOSED:
            raise RuntimeError("save manager is closed")

    def _ensure_loaded(self) -> None:
        self._check_open()
        if self.state is LifecycleState.UNINITIALIZED:
            self.load()

    def load(self) -> None:
        """Replace the store with the contents of the save file.

        A missing file leaves the store as it is. An unreadable or corrupt one
        empties it.
        """
        self._check_open()
        data = self._file.read()
        self.state = LifecycleState.LOADED
        if data is None:
            logger.debug("No save file at %s", self._file.path)
            return

        self._store.replace(data)
        logger.info("Loaded %d save keys from %s", len(self._store), self._file.path)
        self.events.emit_load()

    def save(self) -> bool:
        """Write the whole store to the save file.

        Returns ``False`` if the data only exists in memory afterwards.
        """
        self._ensure_loaded()
        ok = self._file.write(serialize(self._store.snapshot()))
        if not ok:
            logger.error("Save data for %s is only held in memory", self.config.app_identity)
        self.events.emit_save()
        return ok

    def reset(self) -> None:
        self._check_open()
        self.state = LifecycleState.RESETTING
        try:
            self._store.clear()
            self._clear_legacy()
            self.events.emit_reset()
            count = self.resettables.reset_all()
            logger.info("Save data reset (%d registered objects notified)", count)
        finally:
            self.state = LifecycleState.LOADED
        self.save()

    def delete_all(self) -> None:
        self._check_open()
        try:
            self._file.delete()
        except OSError:
            logger.exception("Could not delete save file %s", self._file.path)
        self._clear_legacy()
        self.reset()

    def close(self) -> None:
        if self.state is LifecycleState.CLOSED:
            return
        if self._owns_events:
            self.events.clear()
        if self._owns_resettables:
            self.resettables.clear()
        self.state = LifecycleState.CLOSED

    def __enter__(self) -> "SaveManager":
        self._ensure_loaded()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Legacy store -------------------------------------------------------
    def _legacy_call(self, name: str, *args: Any, fallback: Any = None) -> Any:
        try:
            return getattr(self.legacy, name)(*args)
        except Exception:
            logger.exception("Legacy preferences %s(%s) failed", name, ", ".join(repr(a) for a in args))
            return fallback

    def _clear_legacy(self) -> None:
        self._legacy_call("delete_all")

    def _read_through(
        self,
        key: str,
        default: Any,
        convert: Callable[[Any, Any], Any],
        legacy_getter: str,
        setter: Callable[[str, Any], Any],
    ) -> Any:
        self._ensure_loaded()
        if self._store.has(key):
            return convert(self._store.get_raw(key), default)
        if not self._legacy_call("has_key", key, fallback=False):
            return default

        value = self._legacy_call(legacy_getter, key, default, fallback=None)
        if value is None:
            return default
        logger.info("Migrating save key %r from legacy preferences", key)
        setter(key, value)
        return value

    # Getters ------------------------------------------------------------
    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._read_through(key, default, as_float, "get_float", self.set_float)

    def get_int(self, key: str, default: int = 0) -> int:
        return self._read_through(key, default, as_int, "get_int", self.set_int)

    def get_long(self, key: str, default: int = 0) -> int:
        return self._read_through(key, default, as_long, "get_long", self.set_long)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._read_through(key, default, as_text, "get_string", self.set_string)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return self._read_through(key, default, as_bool, "get_bool", self.set_bool)

    def get_string_array(self, key: str, default: Optional[List[str]] = None) -> Optional[List[str]]:
        return self._read_through(key, default, self._decode_array(key), "get_string_array", self.set_string_array)

    def _decode_array(self, key: str) -> Callable[[Any, Any], List[str]]:
        def convert(raw: Any, default: Any) -> List[str]:
            try:
                return decode_string_array(raw)
            except StringArrayDecodeError as e:
                logger.error("Corrupt preference file for %s: %s", key, e)
                return []

        return convert

    # Setters ------------------------------------------------------------
    def _set_value(self, key: str, value: Any) -> None:
        self._ensure_loaded()
        self._store.put(key, value)
        self.save()

    def set_float(self, key: str, value: float) -> None:
        self._set_value(key, float(value))

    def set_int(self, key: str, value: int) -> None:
        self._set_value(key, int(value))

    def set_long(self, key: str, value: int) -> None:
        self._set_value(key, int(value))

    def set_string(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"set_string expects text, got {type(value).__name__}")
        self._set_value(key, value)

    def set_bool(self, key: str, value: bool) -> None:
        self._set_value(key, 1 if value else 0)

    def set_string_array(self, key: str, values: Sequence[Optional[str]]) -> bool:
        try:
            encoded = encode_string_array(values)
        except StringArrayEncodeError as e:
            logger.error('Cannot save string array (key: "%s"): %s', key, e)
            return False
        self._set_value(key, encoded)
        return True

    # Keys ---------------------------------------------------------------
    def has_save_key(self, key: str) -> bool:
        self._ensure_loaded()
        return self._store.has(key)

    def has_any_save_key(self, key: str) -> bool:
        """True if the key is in the save store or the legacy preferences."""
        return self.has_save_key(key) or bool(self._legacy_call("has_key", key, fallback=False))

    def delete_key(self, key: str) -> None:
        self._ensure_loaded()
        removed = self._store.remove(key)
        self._legacy_call("delete_key", key)
        if removed:
            self.save()

    def keys(self) -> List[str]:
        self._ensure_loaded()
        return sorted(self._store.keys())

    # Whole-document access ----------------------------------------------
    def get_save_json(self) -> str:
        self._ensure_loaded()
        return serialize(self._store.snapshot())

    def set_save_from_json(self, text: str) -> bool:
        self._ensure_loaded()
        try:
            data = deserialize(text)
        except SaveDataError as e:
            logger.error("Rejected save document: %s", e)
            return False
        self._store.replace(data)
        self.save()
        return True

    def raw_value(self, key: str) -> Any:
        """Stored scalar for ``key`` without conversion, ``None`` if absent."""
        self._ensure_loaded()
        value = self._store.get_raw(key)
        return None if value is MISSING else value


def open_save_manager(
    home: Optional[Path] = None,
    app_identity: Optional[str] = None,
    legacy_path: Optional[Path] = None,
    **kwargs: Any,
) -> SaveManager:
    """Build a manager from the environment plus explicit overrides.

    Without an explicit legacy store, the legacy preferences file next to the
    save file is used when it exists.
    """
    config = SaveConfig.from_env(data_dir=home, app_identity=app_identity)
    legacy = kwargs.pop("legacy", None)
    if legacy is None:
        if legacy_path is None and config.legacy_path().is_file():
            legacy_path = config.legacy_path()
        if legacy_path is not None:
            legacy = JsonLegacyPreferences(legacy_path)
    return SaveManager(config=config, legacy=legacy, **kwargs)


__all__ = ["LifecycleState", "SaveManager", "open_save_manager"]
