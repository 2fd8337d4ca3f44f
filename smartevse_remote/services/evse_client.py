from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import quote

import requests

from smartevse_remote.models.settings import DeviceSnapshot

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class Failure:
    kind: str                 # invalid_target | transport | http | decode
    message: str
    status_code: int | None = None

    @property
    def completed(self) -> bool:
        """True when the device answered, even if the answer was unusable."""
        return self.kind in ("http", "decode")


SettingsResult = Union[DeviceSnapshot, Failure]


def format_param(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return format_timestamp(value)
    return str(value)


def format_timestamp(when: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2025-10-17T06:30:00.000Z."""
    return when.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_query(params: Mapping[str, Any]) -> str:
    # Device values are digits and UTC timestamps, which pass through unchanged.
    return "&".join(
        f"{quote(str(key), safe='')}={quote(format_param(value), safe=':')}"
        for key, value in params.items()
    )


class SmartEVSEClient:
    """HTTP wrapper for the SmartEVSE /settings endpoint. Never raises for device errors."""

    def __init__(self, log, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.log = log
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    @staticmethod
    def settings_url(host: str, params: Optional[Mapping[str, Any]] = None) -> str:
        url = f"http://{host.strip()}/settings"
        if params:
            url = f"{url}?{build_query(params)}"
        return url

    def _decode(self, resp) -> SettingsResult:
        try:
            data = resp.json()
        except ValueError:
            self.log.warning("SmartEVSE returned non-JSON payload (HTTP %s)", resp.status_code)
            return Failure("decode", "Response was not valid JSON", resp.status_code)

        if not isinstance(data, dict):
            self.log.warning("SmartEVSE response was not a JSON object: %r", type(data).__name__)
            return Failure("decode", "Response was not a settings object", resp.status_code)

        return DeviceSnapshot.from_payload(data)

    def _request(self, method: str, host: str, params: Optional[Mapping[str, Any]] = None) -> SettingsResult:
        if not host or not host.strip():
            self.log.warning("No device address configured; refusing %s", method)
            return Failure("invalid_target", "Invalid IP address")

        url = self.settings_url(host, params)
        self.log.debug("%s %s", method, url)

        try:
            if method == "GET":
                resp = self.session.get(url, timeout=self.timeout)
            else:
                resp = self.session.post(
                    url,
                    data=b"",
                    headers={"Content-Type": FORM_CONTENT_TYPE},
                    timeout=self.timeout,
                )
        except requests.RequestException as exc:
            self.log.warning("SmartEVSE request to %s failed: %s", host, exc)
            return Failure("transport", str(exc))

        if not 200 <= resp.status_code < 300:
            self.log.warning("SmartEVSE %s %s returned HTTP %s", method, host, resp.status_code)
            return Failure("http", f"HTTP error {resp.status_code}", resp.status_code)

        return self._decode(resp)

    # ------------------------------------------------------------------
    def read(self, host: str) -> SettingsResult:
        return self._request("GET", host)

    def apply(self, host: str, params: Dict[str, Any]) -> SettingsResult:
        return self._request("POST", host, params)
