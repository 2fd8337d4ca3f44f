# smartevse_remote/services/output_formatter.py

from __future__ import annotations

import json
from typing import Iterable, List, Optional

from smartevse_remote.models.mode import EVSEMode
from smartevse_remote.models.settings import HistoryEntry
from smartevse_remote.services.sync_service import SyncState


def history_label(entry: HistoryEntry) -> str:
    if entry.mode is EVSEMode.OFF and entry.charged_kwh is not None:
        return f"Off · {entry.charged_kwh:.2f} kWh"
    return entry.mode.display_name


def _history_to_dict(entry: HistoryEntry) -> dict:
    payload = entry.to_dict()
    payload["mode"] = entry.mode.name.lower()
    payload["label"] = history_label(entry)
    return payload


def status_to_dict(host: str, state: SyncState) -> dict:
    r, g, b = state.status_rgb
    return {
        "host": host,
        "mode": state.current_mode.name.lower(),
        "mode_label": state.current_mode.display_name,
        "status_hex": state.status_hex,
        "status_rgb": [round(r, 4), round(g, 4), round(b, 4)],
        "cable_locked": state.cable_locked,
        "cable_lock_confirmed": state.cable_lock_confirmed,
        "message": state.last_message,
        "history_count": len(state.history),
    }


def format_status(host: str, state: SyncState) -> str:
    lock_txt = "locked" if state.cable_locked else "unlocked"
    if not state.cable_lock_confirmed:
        lock_txt += " (unconfirmed)"
    lines = [
        f"Charger {host}",
        f"  Mode:   {state.current_mode.display_name}",
        f"  Color:  {state.status_hex}",
        f"  Cable:  {lock_txt}",
    ]
    if state.last_message:
        lines.append(f"  Log:    {state.last_message}")
    return "\n".join(lines)


def format_history(entries: Iterable[HistoryEntry], *, full: bool = False) -> str:
    lines: List[str] = []
    for entry in entries:
        local = entry.date.astimezone()
        when = local.strftime("%Y-%m-%d %H:%M") if full else local.strftime("%H:%M")
        lines.append(f"{entry.hex:<8} {history_label(entry):<20} {when}")
    if not lines:
        return "No history recorded."
    return "\n".join(lines)


def emit_status(host: str, state: SyncState, *, as_json: bool = False) -> None:
    if as_json:
        print(json.dumps(status_to_dict(host, state), indent=2))
    else:
        print(format_status(host, state))


def emit_history(entries: Iterable[HistoryEntry], *, as_json: bool = False, full: bool = False, limit: Optional[int] = None) -> None:
    selected = list(entries)
    if limit is not None:
        selected = selected[:limit]
    if as_json:
        print(json.dumps([_history_to_dict(e) for e in selected], indent=2))
    else:
        print(format_history(selected, full=full))
