# smartevse_remote/services/notification_manager.py

from __future__ import annotations

from smartevse_remote.config import PushoverConfig
from smartevse_remote.services.notifiers.pushover import PushoverNotifier


class NotificationManager:
    """Delivers mode-change notifications to the log and, when configured, Pushover."""

    def __init__(self, pushover_cfg: PushoverConfig, log, *, pushover: PushoverNotifier | None = None):
        self.log = log
        self.pushover = pushover or PushoverNotifier(pushover_cfg, log)

    # ------------------------------------------------------------------
    def notify(self, title: str, body: str) -> None:
        self.log.info("[Notify] %s: %s", title, body)
        if self.pushover.enabled:
            self.pushover.send_message(title, body)

    # ------------------------------------------------------------------
    def send_test_notifications(self) -> None:
        self.log.info("Sending test notification via Pushover...")
        if not self.pushover.send_test():
            self.log.warning("Pushover test message was not delivered (disabled or failed).")
