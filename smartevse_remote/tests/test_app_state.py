import sqlite3

from smartevse_remote.services.app_state import AppState


def test_app_state_persists_values(tmp_path):
    db_path = tmp_path / "state.db"
    state = AppState(path=db_path)
    state.set("evse_ip", "10.0.0.5")
    state.set("history_items_v1", [{"id": "a"}])
    state.close()

    reopened = AppState(path=db_path)
    assert reopened.get("evse_ip") == "10.0.0.5"
    assert reopened.get("history_items_v1") == [{"id": "a"}]
    assert reopened.get("missing", "fallback") == "fallback"


def test_app_state_stores_json_text(tmp_path):
    db_path = tmp_path / "state.db"
    state = AppState(path=db_path)
    state.set("evse_on_mode", 3)

    conn = sqlite3.connect(db_path)
    row = conn.execute("SELECT value FROM kv_store WHERE key = ?", ("evse_on_mode",)).fetchone()
    assert row == ("3",)


def test_memory_state_round_trip():
    state = AppState(persist=False)
    assert state.path is None
    state.set("k", {"a": 1})
    assert state.get("k") == {"a": 1}
    state.delete("k")
    assert state.get("k") is None


def test_delete_removes_row(tmp_path):
    state = AppState(path=tmp_path / "state.db")
    state.set("k", 1)
    state.delete("k")
    assert state.get("k") is None
