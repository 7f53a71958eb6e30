"""The older preference store that saves are migrated from.

The save manager only reads from it (and clears it on reset). Values found there
are copied into the save store the first time they are read.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .values import MISSING, as_bool, as_float, as_int, as_long, as_text

logger = logging.getLogger(__name__)


class LegacyPreferences(Protocol):
    """Key-value API of the legacy preference store."""

    def has_key(self, key: str) -> bool: ...

    def get_float(self, key: str, default: float = 0.0) -> float: ...

    def get_int(self, key: str, default: int = 0) -> int: ...

    def get_long(self, key: str, default: int = 0) -> int: ...

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]: ...

    def get_bool(self, key: str, default: bool = False) -> bool: ...

    def get_string_array(self, key: str, default: Optional[List[str]] = None) -> Optional[List[str]]: ...

    def set_float(self, key: str, value: float) -> None: ...

    def set_int(self, key: str, value: int) -> None: ...

    def set_long(self, key: str, value: int) -> None: ...

    def set_string(self, key: str, value: str) -> None: ...

    def set_bool(self, key: str, value: bool) -> None: ...

    def set_string_array(self, key: str, values: Sequence[str]) -> None: ...

    def delete_key(self, key: str) -> None: ...

    def delete_all(self) -> None: ...


class NullLegacyPreferences:
    """Stand-in when there is nothing to migrate from."""

    def has_key(self, key: str) -> bool:
        return False

    def get_float(self, key: str, default: float = 0.0) -> float:
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        return default

    def get_long(self, key: str, default: int = 0) -> int:
        return default

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        return default

    def get_string_array(self, key: str, default: Optional[List[str]] = None) -> Optional[List[str]]:
        return default

    def set_float(self, key: str, value: float) -> None:
        pass

    set_int = set_long = set_string = set_bool = set_string_array = set_float

    def delete_key(self, key: str) -> None:
        pass

    def delete_all(self) -> None:
        pass


class JsonLegacyPreferences:
    """Legacy preferences kept as a flat JSON object.

    Arrays are native JSON lists, booleans are ``1``/``0``. With ``path=None``
    the data only lives in memory. Every setter writes the file straight away.
    """

    def __init__(self, path: Optional[Path] = None, data: Optional[Dict[str, Any]] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._data: Dict[str, Any] = dict(data) if data else self._read()

    def _read(self) -> Dict[str, Any]:
        if self.path is None or not self.path.is_file():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Legacy preferences at %s could not be read: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.error("Legacy preferences at %s are not a JSON object", self.path)
            return {}
        return raw

    def _flush(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")
        except OSError:
            logger.exception("Failed to write legacy preferences to %s", self.path)

    def has_key(self, key: str) -> bool:
        return key in self._data

    def get_float(self, key: str, default: float = 0.0) -> float:
        return as_float(self._data.get(key, MISSING), default)

    def get_int(self, key: str, default: int = 0) -> int:
        return as_int(self._data.get(key, MISSING), default)

    def get_long(self, key: str, default: int = 0) -> int:
        return as_long(self._data.get(key, MISSING), default)

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return as_text(self._data.get(key, MISSING), default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        return as_bool(self._data.get(key, MISSING), default)

    def get_string_array(self, key: str, default: Optional[List[str]] = None) -> Optional[List[str]]:
        value = self._data.get(key, MISSING)
        if value is MISSING:
            return default
        if not isinstance(value, list):
            logger.warning("Legacy preference %r is not an array", key)
            return default
        return [str(v) for v in value]

    def _set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def set_float(self, key: str, value: float) -> None:
        self._set(key, float(value))

    def set_int(self, key: str, value: int) -> None:
        self._set(key, int(value))

    def set_long(self, key: str, value: int) -> None:
        self._set(key, int(value))

    def set_string(self, key: str, value: str) -> None:
        self._set(key, str(value))

    def set_bool(self, key: str, value: bool) -> None:
        self._set(key, 1 if value else 0)

    def set_string_array(self, key: str, values: Sequence[str]) -> None:
        self._set(key, list(values))

    def delete_key(self, key: str) -> None:
        if self._data.pop(key, MISSING) is not MISSING:
            self._flush()

    def delete_all(self) -> None:
        self._data = {}
        self._flush()


__all__ = ["JsonLegacyPreferences", "LegacyPreferences", "NullLegacyPreferences"]
