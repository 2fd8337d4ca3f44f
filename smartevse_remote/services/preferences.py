# smartevse_remote/services/preferences.py

from __future__ import annotations

import logging
import sqlite3

from smartevse_remote.models.mode import ON_MODES, EVSEMode
from smartevse_remote.services.app_state import AppState

HOST_KEY = "evse_ip"
ON_MODE_KEY = "evse_on_mode"


class Preferences:
    """Stored device address and preferred "on" mode."""

    def __init__(self, state: AppState, *, default_host: str = "", default_on_mode: EVSEMode = EVSEMode.NORMAL):
        self.state = state
        self.default_host = default_host
        self.default_on_mode = default_on_mode
        self._log = logging.getLogger("smartevse.prefs")

    def _get(self, key: str):
        try:
            return self.state.get(key)
        except sqlite3.Error as exc:
            self._log.debug("Preference %s load failed: %s", key, exc)
            return None

    def _set(self, key: str, value) -> None:
        try:
            self.state.set(key, value)
        except sqlite3.Error as exc:
            self._log.debug("Preference %s save failed: %s", key, exc)

    # ------------------------------------------------------------------
    @property
    def host(self) -> str:
        value = self._get(HOST_KEY)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return self.default_host

    @host.setter
    def host(self, value: str) -> None:
        self._set(HOST_KEY, (value or "").strip())

    @property
    def on_mode(self) -> EVSEMode:
        code = self._get(ON_MODE_KEY)
        if isinstance(code, int) and not isinstance(code, bool):
            for mode in ON_MODES:
                if mode.code == code:
                    return mode
        return self.default_on_mode

    @on_mode.setter
    def on_mode(self, mode: EVSEMode) -> None:
        if mode not in ON_MODES:
            raise ValueError(f"{mode.display_name} is not a valid on mode")
        self._set(ON_MODE_KEY, mode.code)
