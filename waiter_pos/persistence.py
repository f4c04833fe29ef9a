"""SQLite-backed key-value store for device settings and the menu snapshot."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from waiter_pos.config import DB_PATH

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class KeyValueStore:
    """Durable string-keyed store. Values are stored as JSON text."""

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)
        self.bootstrap_schema()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create the settings table if it does not already exist."""
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value for ``key``, or ``default`` if absent or unreadable."""
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except ValueError:
            logger.warning("Stored value for %r is not valid JSON; ignoring it", key)
            return default

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                    """,
                    (key, encoded, _utc_now_iso()),
                )

    def remove(self, key: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

