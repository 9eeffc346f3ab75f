"""Application-wide logger writing to platformdirs user_log_dir."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "questfocus"
_LOG_FILE = "questfocus.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3
_LEVEL_ENV = "QUESTFOCUS_LOG_LEVEL"

_logger: logging.Logger | None = None


def log_file_path() -> Path:
    """Where the rotating log file lives."""
    return Path(user_log_dir(_APP_NAME)) / _LOG_FILE


def _level_from_env() -> int:
    name = os.environ.get(_LEVEL_ENV, "DEBUG").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.DEBUG


def _file_handler(logger: logging.Logger) -> logging.handlers.RotatingFileHandler | None:
    # Other handlers (pytest's capture handlers, for one) may already be attached.
    for handler in logger.handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            return handler
    return None


def get_logger() -> logging.Logger:
    """Return the singleton application logger, initialising it on first call.

    The level comes from ``QUESTFOCUS_LOG_LEVEL`` (default DEBUG). Session
    transitions, rejected actions and persistence failures all end up in
    the same rotating file.
    """
    global _logger
    if _logger is not None:
        return _logger

    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(_level_from_env())
    logger.propagate = False

    if _file_handler(logger) is None:
        path = log_file_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        logger.addHandler(handler)

    _logger = logger
    return _logger
