from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping

from .values import MISSING, StoredValue, normalize_stored


def _check_key(key: str) -> str:
    if not isinstance(key, str) or not key:
        raise ValueError(f"save keys must be non-empty text, got {key!r}")
    return key


class SaveStore:
    """In-memory key -> value mapping backing a save file.

    Readers only ever see whole values; ``replace`` swaps the mapping in one
    step after the incoming document has been validated.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Dict[str, StoredValue] = {}
        if data:
            self.replace(data)

    def has(self, key: str) -> bool:
        return key in self._data

    def get_raw(self, key: str, default: Any = MISSING) -> Any:
        return self._data.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self._data[_check_key(key)] = normalize_stored(value)

    def remove(self, key: str) -> bool:
        return self._data.pop(key, MISSING) is not MISSING

    def replace(self, data: Mapping[str, Any]) -> None:
        fresh: Dict[str, StoredValue] = {}
        for key, value in data.items():
            fresh[_check_key(key)] = normalize_stored(value)
        self._data = fresh

    def clear(self) -> None:
        self._data = {}

    def snapshot(self) -> Dict[str, StoredValue]:
        return dict(self._data)

    def keys(self) -> List[str]:
        return list(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))


__all__ = ["SaveStore"]
