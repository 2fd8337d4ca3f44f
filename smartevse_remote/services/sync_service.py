# smartevse_remote/services/sync_service.py

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from smartevse_remote.logging import StructuredLog, SyncLogEntry
from smartevse_remote.models.mode import EVSEMode, resolve_mode
from smartevse_remote.models.settings import DeviceSnapshot, HistoryEntry
from smartevse_remote.services.color_resolver import UNKNOWN_STATUS_HEX, hex_to_rgb, resolve_hex
from smartevse_remote.services.evse_client import Failure, SmartEVSEClient, format_timestamp
from smartevse_remote.services.history_store import HistoryStore
from smartevse_remote.services.notification_manager import NotificationManager

DEFAULT_NOTIFICATION_TITLE = "SmartEVSE mode changed"


@dataclass(frozen=True)
class SyncState:
    last_message: str = ""
    status_hex: str = UNKNOWN_STATUS_HEX
    current_mode: EVSEMode = EVSEMode.OFF
    cable_locked: bool = False
    # False while cable_locked only reflects a request the device has not echoed yet.
    cable_lock_confirmed: bool = False
    history: Tuple[HistoryEntry, ...] = ()

    @property
    def status_rgb(self) -> Tuple[float, float, float]:
        return hex_to_rgb(self.status_hex)


Subscriber = Callable[[SyncState], None]


def _failure_message(failure: Failure, *, command: bool) -> str:
    if failure.kind == "transport":
        return f"Network error: {failure.message}"
    if failure.kind == "decode":
        return "Settings updated." if command else "Could not decode device settings."
    return failure.message


class SyncService:
    """
    Owns the synchronized view of one charger: talks to the device, detects
    mode transitions, records history and republishes state to subscribers.
    """

    def __init__(
        self,
        client: SmartEVSEClient,
        history: HistoryStore,
        notifier: NotificationManager,
        log,
        *,
        notification_title: str = DEFAULT_NOTIFICATION_TITLE,
        structured_log: Optional[StructuredLog] = None,
        reboot_settle_seconds: float = 1.0,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.history = history
        self.notifier = notifier
        self.log = log
        self.notification_title = notification_title
        self.structured_log = structured_log
        self.reboot_settle_seconds = reboot_settle_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep

        self._state = SyncState(history=history.entries)
        self._state_lock = threading.RLock()
        self._subscribers: List[Subscriber] = []
        self._host_locks: Dict[str, threading.RLock] = {}
        self._host_locks_guard = threading.Lock()

    # State publication ------------------------------------------------
    @property
    def state(self) -> SyncState:
        with self._state_lock:
            return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._state_lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._state_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def _update(self, **changes: Any) -> SyncState:
        with self._state_lock:
            self._state = replace(self._state, **changes)
            return self._state

    def _emit(self, state: SyncState) -> None:
        with self._state_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(state)
            except Exception as exc:
                self.log.warning("State subscriber %r failed: %s", callback, exc)

    def _publish(self, **changes: Any) -> SyncState:
        state = self._update(**changes)
        self._emit(state)
        return state

    # Single-flight guard ----------------------------------------------
    def _host_lock(self, host: str) -> threading.RLock:
        key = host.strip().lower()
        with self._host_locks_guard:
            lock = self._host_locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._host_locks[key] = lock
            return lock

    @contextmanager
    def _single_flight(self, host: str, wait: bool) -> Iterator[bool]:
        lock = self._host_lock(host)
        if not lock.acquire(blocking=wait):
            yield False
            return
        try:
            yield True
        finally:
            lock.release()

    # ------------------------------------------------------------------
    def _record(self, host: str, action: str, params: Optional[Dict[str, Any]], outcome: str) -> None:
        if self.structured_log is None or not self.structured_log.enabled:
            return
        state = self.state
        self.structured_log.write(
            SyncLogEntry(
                timestamp=self._clock().isoformat(),
                host=host,
                action=action,
                params=params,
                outcome=outcome,
                mode=state.current_mode.name.lower(),
                status_hex=state.status_hex,
                message=state.last_message,
            )
        )

    @staticmethod
    def _valid_host(host: str) -> bool:
        return bool(host and host.strip())

    # Observe step -----------------------------------------------------
    def observe(self, snapshot: DeviceSnapshot) -> bool:
        """Apply one decoded snapshot. Returns True when a mode transition was recorded."""
        mode = resolve_mode(snapshot.mode_code)
        hex_color = resolve_hex(mode, snapshot)
        changes: Dict[str, Any] = {"status_hex": hex_color}

        with self._state_lock:
            transitioned = mode is not self._state.current_mode
            if transitioned:
                energy = snapshot.charged_kwh if mode is EVSEMode.OFF else None
                entry = HistoryEntry(date=self._clock(), mode=mode, hex=hex_color, charged_kwh=energy)
                changes["current_mode"] = mode
                changes["history"] = self.history.append(entry)
            if snapshot.cablelock is not None:
                changes["cable_locked"] = snapshot.cablelock != 0
                changes["cable_lock_confirmed"] = True
            state = self._update(**changes)

        self._emit(state)
        if transitioned:
            self.log.info("Mode changed to %s (color %s)", mode.display_name, hex_color)
            self.notifier.notify(self.notification_title, mode.display_name)
        return transitioned

    # Refresh ----------------------------------------------------------
    def refresh(self, host: str, *, wait: bool = True) -> bool:
        """Read the device. With wait=False the call is dropped if the host is busy."""
        if not self._valid_host(host):
            self.log.warning("Refresh skipped: no device address")
            return False

        with self._single_flight(host, wait) as acquired:
            if not acquired:
                self.log.debug("Refresh for %s dropped; another operation is in flight", host)
                return False

            result = self.client.read(host)
            if isinstance(result, Failure):
                self._publish(last_message=_failure_message(result, command=False))
                self._record(host, "refresh", None, result.kind)
                return False

            self.observe(result)
            self._record(host, "refresh", None, "ok")
            return True

    # Commands ---------------------------------------------------------
    def _command(self, host: str, action: str, params: Dict[str, Any]) -> bool:
        if not self._valid_host(host):
            self.log.warning("Command %s refused: no device address", action)
            return False

        with self._single_flight(host, True):
            self.log.info("Sending %s to %s: %s", action, host, params)
            result = self.client.apply(host, params)
            if isinstance(result, Failure):
                self._publish(last_message=_failure_message(result, command=True))
                self._record(host, action, params, result.kind)
                return result.kind == "decode"

            current = result.override_current if result.override_current is not None else 0
            self._publish(last_message=f"Mode: {result.mode_label or 'unknown'} | Current: {current}A")
            self.observe(result)
            self._record(host, action, params, "ok")
            return True

    def set_mode(self, host: str, mode: EVSEMode) -> bool:
        return self._command(host, "set-mode", {"mode": mode.code})

    def set_override_current(self, host: str, amps: int) -> bool:
        return self._command(host, "set-override-current", {"override_current": int(amps)})

    def set_start_time(self, host: str, when: datetime, mode: EVSEMode) -> bool:
        params = {"starttime": format_timestamp(when), "mode": mode.code}
        return self._command(host, "set-schedule", params)

    def set_cable_lock(self, host: str, locked: bool) -> bool:
        if not self._valid_host(host):
            self.log.warning("Command set-cable-lock refused: no device address")
            return False
        with self._single_flight(host, True):
            accepted = self._command(host, "set-cable-lock", {"cablelock": "1" if locked else "0"})
            # Tentative until a later snapshot reports the lock state.
            self._publish(cable_locked=locked, cable_lock_confirmed=False)
            return accepted

    def reboot(self, host: str) -> bool:
        if not self._valid_host(host):
            self.log.warning("Command reboot refused: no device address")
            return False
        with self._single_flight(host, True):
            accepted = self._command(host, "reboot", {"reboot": "1"})
            if not accepted:
                return False
            # The controller drops off the network briefly while restarting.
            if self.reboot_settle_seconds > 0:
                self._sleep(self.reboot_settle_seconds)
            self.refresh(host)
            return accepted

    # History ----------------------------------------------------------
    def clear_history(self) -> None:
        # Store and published history change under one lock, as in observe().
        with self._state_lock:
            self.history.clear()
            state = self._update(history=())
        self._emit(state)

    def export_history(self) -> str:
        return self.history.export_json()

    def import_history(self, text: str) -> int:
        with self._state_lock:
            entries = self.history.import_json(text)
            state = self._update(history=entries)
        self._emit(state)
        return len(entries)
