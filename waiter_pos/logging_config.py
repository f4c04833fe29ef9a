"""File logging for the waiter client.

The terminal belongs to Textual, so log records go to a file instead of
stderr.
"""

from __future__ import annotations

import logging
from pathlib import Path

from waiter_pos.config import LOG_LEVEL, LOG_PATH

LOGGER_NAME = "waiter_pos"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(log_path: str = LOG_PATH, level: str = LOG_LEVEL) -> logging.Logger:
    """Attach a file handler to the package logger once and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    log_file = Path(log_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
