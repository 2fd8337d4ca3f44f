# smartevse_remote/services/history_store.py

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from typing import Any, Iterable, List, Tuple

from smartevse_remote.models.settings import HistoryEntry
from smartevse_remote.services.app_state import AppState

HISTORY_STORAGE_KEY = "history_items_v1"
HISTORY_LIMIT = 50


def _decode_entries(raw: Any, log: logging.Logger) -> List[HistoryEntry]:
    if not isinstance(raw, list):
        return []
    entries: List[HistoryEntry] = []
    for item in raw:
        if not isinstance(item, dict):
            log.debug("Skipping non-object history record: %r", item)
            continue
        try:
            entries.append(HistoryEntry.from_dict(item))
        except (KeyError, TypeError, ValueError) as exc:
            log.debug("Skipping corrupt history record %r: %s", item, exc)
    return entries


class HistoryStore:
    """Newest-first, capped log of mode transitions persisted as one JSON array."""

    def __init__(self, state: AppState, *, limit: int = HISTORY_LIMIT, key: str = HISTORY_STORAGE_KEY):
        if limit <= 0:
            raise ValueError("History limit must be positive")
        self.state = state
        self.limit = limit
        self.key = key
        self._log = logging.getLogger("smartevse.history")
        self._lock = threading.Lock()
        self._entries: List[HistoryEntry] = self._load()

    # ------------------------------------------------------------------
    def _load(self) -> List[HistoryEntry]:
        try:
            raw = self.state.get(self.key)
        except (sqlite3.Error, ValueError) as exc:
            self._log.debug("History load failed: %s", exc)
            return []
        return _decode_entries(raw, self._log)[: self.limit]

    def _save(self) -> None:
        payload = [entry.to_dict() for entry in self._entries]
        try:
            self.state.set(self.key, payload)
        except (sqlite3.Error, TypeError, ValueError) as exc:
            self._log.debug("History save failed: %s", exc)

    # ------------------------------------------------------------------
    @property
    def entries(self) -> Tuple[HistoryEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def append(self, entry: HistoryEntry) -> Tuple[HistoryEntry, ...]:
        with self._lock:
            self._entries.insert(0, entry)
            del self._entries[self.limit:]
            self._save()
            return tuple(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            self._save()

    # Export / import --------------------------------------------------
    def export_json(self) -> str:
        with self._lock:
            payload = [entry.to_dict() for entry in self._entries]
        return json.dumps(payload, indent=2)

    def import_json(self, text: str) -> Tuple[HistoryEntry, ...]:
        """Replace the history with entries from an exported JSON array."""
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"History import is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise ValueError("History import must be a JSON array")
        entries = _decode_entries(raw, self._log)
        if raw and not entries:
            raise ValueError("History import contained no valid entries")
        return self.replace(entries)

    def replace(self, entries: Iterable[HistoryEntry]) -> Tuple[HistoryEntry, ...]:
        ordered = sorted(entries, key=lambda e: e.date, reverse=True)
        with self._lock:
            self._entries = ordered[: self.limit]
            self._save()
            return tuple(self._entries)
