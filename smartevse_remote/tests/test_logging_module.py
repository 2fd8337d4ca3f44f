import json
import logging
import os
import tempfile

from smartevse_remote.logging import ConsoleLog, StructuredLog, SyncLogEntry


def test_structured_log_writes_json():
    # Use a workspace temp dir to avoid system temp constraints.
    with tempfile.TemporaryDirectory(dir=".") as td:
        log_path = os.path.join(td, "structured.log")
        entry = SyncLogEntry(
            timestamp="2025-10-17T12:00:00+00:00",
            host="10.0.0.5",
            action="set-mode",
            params={"mode": 2},
            outcome="ok",
            mode="solar",
            status_hex="#FFFF00",
            message="Mode: Solar | Current: 16A",
        )
        StructuredLog(log_path, enabled=True).write(entry)
        with open(log_path, "r", encoding="utf-8") as fh:
            line = fh.read().strip()
        assert line
        payload = json.loads(line)
        assert payload["timestamp"] == entry.timestamp
        assert payload["params"] == {"mode": 2}
        assert payload["mode"] == "solar"


def test_structured_log_disabled_without_path():
    assert StructuredLog(None, enabled=True).enabled is False


def test_console_log_quiet_skips_handlers():
    root = logging.getLogger()
    orig_handlers = list(root.handlers)
    orig_level = root.level
    try:
        log = ConsoleLog(level="INFO", quiet=True).setup()
        assert log.name == "smartevse"
        assert root.handlers == []
    finally:
        root.handlers.clear()
        root.handlers.extend(orig_handlers)
        root.setLevel(orig_level)
