# smartevse_remote/services/notifiers/pushover.py

from __future__ import annotations

import urllib.error
import urllib.parse
import urllib.request
from datetime import datetime

from smartevse_remote.config import PushoverConfig


class PushoverNotifier:
    """Minimal Pushover client with helpful logging and validation."""

    API_URL = "https://api.pushover.net/1/messages.json"

    def __init__(self, cfg: PushoverConfig, log):
        self.cfg = cfg
        self.log = log
        self._enabled = bool(cfg.enabled and cfg.token and cfg.user)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ------------------------------------------------------------------
    def _post(self, title: str, message: str, priority: int = 0) -> bool:
        if not self._enabled:
            self.log.debug("[Pushover] Disabled; skipping message: %s", title)
            return False

        data = urllib.parse.urlencode(
            {
                "token": self.cfg.token,
                "user": self.cfg.user,
                "title": title,
                "message": message,
                "priority": priority,
            }
        ).encode("utf-8")

        req = urllib.request.Request(self.API_URL, data=data)

        try:
            urllib.request.urlopen(req, timeout=10)
            self.log.info("[Pushover] Sent notification: %s", title)
            return True
        except urllib.error.URLError as exc:
            self.log.warning("[Pushover] Failed to send message: %s", exc)
            return False

    # ------------------------------------------------------------------
    def send_test(self) -> bool:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        msg = f"Test message from SmartEVSE remote at {timestamp}"
        return self._post("SmartEVSE Remote Test", msg)

    def send_message(self, title: str, message: str) -> bool:
        return self._post(title, message)
