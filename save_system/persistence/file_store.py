from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..values import StoredValue, normalize_stored

logger = logging.getLogger(__name__)


class SaveDataError(ValueError):
    """Raised when a save document cannot be parsed or holds unsupported values."""


def serialize(data: Mapping[str, Any]) -> str:
    return json.dumps(dict(data), indent=2, sort_keys=True)


def deserialize(text: str) -> Dict[str, StoredValue]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise SaveDataError(f"save document is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise SaveDataError("save document root is not an object")

    out: Dict[str, StoredValue] = {}
    for key, value in raw.items():
        if not key:
            raise SaveDataError("save document contains an empty key")
        try:
            out[key] = normalize_stored(value)
        except ValueError as e:
            raise SaveDataError(f"key {key!r}: {e}") from e
    return out


@dataclass
class SaveFile:
    """The canonical save file.

    ``write`` and ``read`` absorb every I/O problem: callers get ``False`` or an
    empty mapping and the details go to the log.
    """

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def exists(self) -> bool:
        return self.path.is_file()

    def write(self, text: str) -> bool:
        try:
            self._write_atomic(text)
            return True
        except (OSError, ValueError) as e:
            logger.warning("Primary save write failed (%s: %s); recreating %s", type(e).__name__, e, self.path)

        try:
            self._write_new(text)
            return True
        except FileNotFoundError as e:
            logger.error("The save file was not found: '%s'", e)
        except NotADirectoryError as e:
            logger.error("The save directory was not found: '%s'", e)
        except PermissionError as e:
            logger.error("The save file could not be opened: '%s'", e)
        except (OSError, ValueError) as e:
            logger.error("The save file could not be created: '%s'", e)
        return False

    def _write_atomic(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        finally:
            if tmp.exists():
                try:
                    tmp.unlink()
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp)

    def _write_new(self, text: str) -> None:
        self.delete()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "x", encoding="utf-8") as fh:
            fh.write(text)

    def read(self) -> Optional[Dict[str, StoredValue]]:
        """Return the stored mapping, ``None`` if there is no file.

        A file that cannot be read or parsed yields an empty mapping.
        """
        if not self.exists():
            return None

        try:
            return deserialize(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("The save file could not be opened: '%s'", e)
        except SaveDataError as e:
            logger.error("The save file could not be loaded: '%s'", e)
        self._backup_corrupt()
        return {}

    def _backup_corrupt(self) -> Optional[Path]:
        ts = time.strftime("%Y%m%d_%H%M%S")
        bak = self.path.with_name(f"{self.path.name}.bak.{ts}")
        try:
            bak.write_bytes(self.path.read_bytes())
        except OSError:
            logger.exception("Could not back up corrupt save file %s", self.path)
            return None
        logger.info("Backed up corrupt save file to %s", bak)
        return bak

    def delete(self) -> bool:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True


__all__ = ["SaveDataError", "SaveFile", "deserialize", "serialize"]
