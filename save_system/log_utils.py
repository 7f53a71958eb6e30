"""Logging-related utilities.

Library code only ever uses ``logging.getLogger(__name__)``; handlers are set up
here by entry points (the CLI) and never by the library itself.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_FILENAME = "save_system.log"


def setup_logging(log_dir: Optional[Path] = None, verbose: bool = False) -> Optional[Path]:
    """Configure logging to stderr and, if possible, a persistent file.

    Returns the log file path, or ``None`` when only the console handler could
    be installed. An existing root configuration (e.g. when embedded in a host
    application) is left alone.
    """

    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO
    if root.handlers:
        if verbose:
            root.setLevel(logging.DEBUG)
        return None

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_path: Optional[Path] = None
    if log_dir is not None:
        try:
            Path(log_dir).mkdir(parents=True, exist_ok=True)
            log_path = Path(log_dir) / LOG_FILENAME
            handlers.append(logging.FileHandler(str(log_path), mode="a", encoding="utf-8"))
        except OSError:
            log_path = None

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)
    if log_dir is not None and log_path is None:
        logging.getLogger(__name__).warning("Could not open a log file in %s", log_dir)
    return log_path


__all__ = ["LOG_FILENAME", "LOG_FORMAT", "setup_logging"]
