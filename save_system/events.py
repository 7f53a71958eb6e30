"""Save lifecycle notifications and the reset registry."""

from __future__ import annotations

import logging
import weakref
from typing import Callable, Dict, List, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class SaveEvents:
    """Small callback-based event hub for save/load/reset.

    Callbacks run synchronously, in registration order, after the operation
    finished. A failing callback is logged and the rest still run.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {
            "save": [],
            "load": [],
            "reset": [],
        }

    def on_save(self, callback: Listener) -> None:
        self._listeners["save"].append(callback)

    def on_load(self, callback: Listener) -> None:
        self._listeners["load"].append(callback)

    def on_reset(self, callback: Listener) -> None:
        self._listeners["reset"].append(callback)

    def remove(self, callback: Listener) -> None:
        for callbacks in self._listeners.values():
            while callback in callbacks:
                callbacks.remove(callback)

    def clear(self) -> None:
        for callbacks in self._listeners.values():
            callbacks.clear()

    def _emit(self, name: str) -> None:
        for callback in list(self._listeners[name]):
            try:
                callback()
            except Exception:
                logger.exception("Listener %r for '%s' failed", callback, name)

    def emit_save(self) -> None:
        self._emit("save")

    def emit_load(self) -> None:
        self._emit("load")

    def emit_reset(self) -> None:
        self._emit("reset")


@runtime_checkable
class SaveResettable(Protocol):
    """Objects that clear their own derived state when saves are reset."""

    def reset_save(self) -> None: ...


class ResetRegistry:
    """Objects that asked to be reset together with the save data.

    Held weakly: an object that has been garbage collected is simply skipped.
    """

    def __init__(self) -> None:
        self._members: "weakref.WeakSet[SaveResettable]" = weakref.WeakSet()

    def register(self, obj: SaveResettable) -> None:
        if not isinstance(obj, SaveResettable):
            raise TypeError(f"{type(obj).__name__} does not implement reset_save()")
        self._members.add(obj)

    def unregister(self, obj: SaveResettable) -> None:
        self._members.discard(obj)

    def clear(self) -> None:
        self._members.clear()

    def __len__(self) -> int:
        return len(self._members)

    def reset_all(self) -> int:
        count = 0
        for obj in list(self._members):
            try:
                obj.reset_save()
                count += 1
            except Exception:
                logger.exception("reset_save() failed for %r", obj)
        return count


__all__ = ["Listener", "ResetRegistry", "SaveEvents", "SaveResettable"]
