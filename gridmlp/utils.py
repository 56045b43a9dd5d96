"""Logging and filesystem helpers.

Usage::

    from gridmlp.utils import get_logger

    logger = get_logger(__name__)
    logger.info("Training started")

All loggers live under the ``gridmlp`` namespace.  Until
:func:`setup_logging` is called, records propagate to whatever the host
application configured (pytest's ``caplog`` included).
"""

from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path

ROOT_LOGGER = "gridmlp"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_initialized = False


def setup_logging(
    level: int | str = logging.INFO,
    *,
    log_file: str | Path | None = None,
    stream=None,
) -> logging.Logger:
    """Attach console (and optional file) handlers to the ``gridmlp`` logger.

    Repeated calls only adjust the level.
    """

    global _initialized

    root = logging.getLogger(ROOT_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root.setLevel(level)
    if _initialized:
        return root

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    _initialized = True
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``gridmlp`` logger for module ``name``."""

    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def ensure_dir(path: str | Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def reset_dir(path: str | Path) -> Path:
    """Delete ``path`` with all of its contents and recreate it empty."""

    path = Path(path)
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


__all__ = ["ensure_dir", "get_logger", "reset_dir", "setup_logging"]
