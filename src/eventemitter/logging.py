"""Centralized logging configuration for eventemitter."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_ROOT = "eventemitter"
_MAX_LOG_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    stderr: bool = True,
) -> logging.Logger:
    """Configure and return the eventemitter root logger.

    Library code never calls this; it is meant for applications and for
    the ``eventemitter`` command.  Every module logs through
    ``get_logger()`` and inherits whatever is configured here.

    Parameters
    ----------
    level:
        Logging verbosity (DEBUG, INFO, WARNING, ERROR).  Unknown names
        fall back to WARNING.
    log_file:
        Optional log file path.  Rotated at 5 MB, keeping 3 backups.
    stderr:
        Whether to also emit log records to stderr.
    """
    logger = logging.getLogger(_ROOT)

    # Close and clear existing handlers so re-configuration works correctly
    for h in logger.handlers[:]:
        h.close()
    logger.handlers.clear()

    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if stderr:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(fmt)
        logger.addHandler(stderr_handler)

    if log_file:
        file_path = Path(log_file).expanduser()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(file_path),
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_BACKUP_COUNT,
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``eventemitter`` namespace."""
    return logging.getLogger(f"{_ROOT}.{name}")
