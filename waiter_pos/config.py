"""Runtime configuration defaults for persistence, logging and the backend client."""

from __future__ import annotations

import os

_DB_PATH_ENV = "WAITER_POS_DB_PATH"
_LOG_PATH_ENV = "WAITER_POS_LOG_PATH"
_LOG_LEVEL_ENV = "WAITER_POS_LOG_LEVEL"
_HTTP_TIMEOUT_ENV = "WAITER_POS_HTTP_TIMEOUT"


def _env(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip()
    return value or default


DB_PATH = _env(_DB_PATH_ENV, "data/waiter_pos.db")

LOG_PATH = _env(_LOG_PATH_ENV, "/tmp/waiter-pos-debug.log")
LOG_LEVEL = _env(_LOG_LEVEL_ENV, "DEBUG").upper()

HTTP_TIMEOUT_SECONDS = float(_env(_HTTP_TIMEOUT_ENV, "10"))
DEFAULT_URL_SCHEME = "http"

DEFAULT_TABLE_NUMBER = "0"
