"""On-disk persistence for the save store.

The whole store is written as one JSON object to a single file.

Design goals:
  * Atomic writes, with a delete-and-recreate fallback
  * Resilient loads (back up a corrupt file and start empty)
  * Nothing ever raises out of a read or write; failures are logged
"""

from .file_store import SaveDataError, SaveFile, deserialize, serialize

__all__ = ["SaveDataError", "SaveFile", "deserialize", "serialize"]
