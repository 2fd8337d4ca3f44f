import sqlite3

import pytest

from smartevse_remote.models.mode import EVSEMode
from smartevse_remote.services.app_state import AppState
from smartevse_remote.services.preferences import ON_MODE_KEY, Preferences


def test_defaults_when_nothing_stored():
    prefs = Preferences(AppState(persist=False), default_host="192.168.1.100")
    assert prefs.host == "192.168.1.100"
    assert prefs.on_mode is EVSEMode.NORMAL


def test_stored_values_win(tmp_path):
    db_path = tmp_path / "state.db"
    prefs = Preferences(AppState(path=db_path), default_host="192.168.1.100")
    prefs.host = " 10.0.0.7 "
    prefs.on_mode = EVSEMode.SOLAR

    reloaded = Preferences(AppState(path=db_path), default_host="192.168.1.100")
    assert reloaded.host == "10.0.0.7"
    assert reloaded.on_mode is EVSEMode.SOLAR


def test_off_is_not_an_on_mode():
    prefs = Preferences(AppState(persist=False))
    with pytest.raises(ValueError):
        prefs.on_mode = EVSEMode.OFF


def test_invalid_stored_on_mode_falls_back():
    state = AppState(persist=False)
    state.set(ON_MODE_KEY, 0)
    assert Preferences(state).on_mode is EVSEMode.NORMAL


def test_storage_errors_are_swallowed():
    class BrokenState:
        def get(self, key, default=None):
            raise sqlite3.OperationalError("database is locked")

        def set(self, key, value):
            raise sqlite3.OperationalError("database is locked")

    prefs = Preferences(BrokenState(), default_host="evse.local")
    prefs.host = "10.0.0.9"
    assert prefs.host == "evse.local"
    assert prefs.on_mode is EVSEMode.NORMAL
