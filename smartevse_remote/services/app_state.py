# smartevse_remote/services/app_state.py

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional, Union


class AppState:
    """SQLite-backed key-value store for history and preferences."""

    def __init__(self, path: Optional[Union[Path, str]] = None, *, persist: bool = True):
        default_path = Path.home() / ".smartevse_remote_state.db"
        self._persist = persist
        self._log = logging.getLogger("smartevse.state")
        if self._persist:
            resolved = Path(path).expanduser() if path else default_path
            resolved.parent.mkdir(parents=True, exist_ok=True)
            self.path: Optional[Path] = resolved
            # Commands and passive polling may touch the store from different threads.
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._init_schema()
        else:
            self.path = None
            self._conn = None
            self._memory: Dict[str, Any] = {}

    # ------------------------------------------------------------------
    def _init_schema(self) -> None:
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    def flush(self) -> None:
        if self._persist and self._conn:
            self._conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self.flush()
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    def get(self, key: str, default=None):
        if not self._persist:
            return self._memory.get(key, default)
        cur = self._conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
        row = cur.fetchone()
        if not row:
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            self._log.debug("Stored value for %s is not valid JSON; using default", key)
            return default

    def set(self, key: str, value) -> None:
        if not self._persist:
            self._memory[key] = value
            return
        payload = json.dumps(value)
        self._conn.execute(
            """
            INSERT INTO kv_store(key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            (key, payload),
        )
        self._conn.commit()

    def delete(self, key: str) -> None:
        if not self._persist:
            self._memory.pop(key, None)
            return
        self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        self._conn.commit()

    # ------------------------------------------------------------------
    def __del__(self):
        try:
            self.close()
        except Exception:
            pass
