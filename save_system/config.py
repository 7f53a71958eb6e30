from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_APP_IDENTITY = "save_system"
SAVE_EXTENSION = ".gameData"
LEGACY_FILENAME = "legacy_prefs.json"

ENV_APP_ID = "SAVE_SYSTEM_APP_ID"
ENV_HOME = "SAVE_SYSTEM_HOME"


def _save_home() -> Path:
    # Same folder holds the save file, the legacy prefs and the log
    return Path.home() / ".save_system"


@dataclass(frozen=True)
class SaveConfig:
    """Where the save file lives.

    One file per installation, derived only from the application identity. No
    version component is part of the path.
    """

    app_identity: str = DEFAULT_APP_IDENTITY
    data_dir: Path = field(default_factory=_save_home)
    extension: str = SAVE_EXTENSION
    legacy_filename: str = LEGACY_FILENAME

    def __post_init__(self) -> None:
        if not self.app_identity or any(c in self.app_identity for c in "/\\"):
            raise ValueError(f"invalid application identity: {self.app_identity!r}")
        object.__setattr__(self, "data_dir", Path(self.data_dir).expanduser())

    def save_path(self) -> Path:
        return self.data_dir / f"{self.app_identity}{self.extension}"

    def legacy_path(self) -> Path:
        return self.data_dir / self.legacy_filename

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "SaveConfig":
        env = os.environ if environ is None else environ
        kwargs = {}
        if env.get(ENV_APP_ID):
            kwargs["app_identity"] = env[ENV_APP_ID]
        if env.get(ENV_HOME):
            kwargs["data_dir"] = Path(env[ENV_HOME])
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)


__all__ = ["SaveConfig", "ENV_APP_ID", "ENV_HOME"]
