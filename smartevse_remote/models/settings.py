# smartevse_remote/models/settings.py
from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from smartevse_remote.models.mode import EVSEMode


def _opt_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


def _opt_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _opt_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
        return result if math.isfinite(result) else None
    return None


@dataclass(frozen=True)
class DeviceSnapshot:
    """One decoded /settings response. Every field is optional."""

    mode_label: str | None = None
    mode_code: int | None = None
    override_current: int | None = None
    color_off: str | None = None
    color_normal: str | None = None
    color_solar: str | None = None
    color_smart: str | None = None
    cablelock: int | None = None
    charged_kwh: float | None = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "DeviceSnapshot":
        mode_field = payload.get("mode")
        mode_code = _opt_int(payload.get("mode_id"))
        if mode_code is None and not isinstance(mode_field, str):
            mode_code = _opt_int(mode_field)

        cablelock = _opt_int(payload.get("cablelock"))
        if cablelock is not None:
            cablelock = 1 if cablelock else 0

        return cls(
            mode_label=_opt_str(mode_field),
            mode_code=mode_code,
            override_current=_opt_int(payload.get("override_current")),
            color_off=_opt_str(payload.get("color_off")),
            color_normal=_opt_str(payload.get("color_normal")),
            color_solar=_opt_str(payload.get("color_solar")),
            color_smart=_opt_str(payload.get("color_smart")),
            cablelock=cablelock,
            charged_kwh=_opt_float(payload.get("charged_kwh")),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class HistoryEntry:
    date: datetime
    mode: EVSEMode
    hex: str
    charged_kwh: float | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "mode": self.mode.code,
            "hex": self.hex,
            "chargedKWh": self.charged_kwh,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        """Rebuild a stored entry; raises ValueError/KeyError/TypeError on bad records."""
        date = datetime.fromisoformat(data["date"])
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)
        mode_code = data["mode"]
        if isinstance(mode_code, bool) or not isinstance(mode_code, int):
            raise ValueError(f"Invalid mode code: {mode_code!r}")
        hex_color = data["hex"]
        if not isinstance(hex_color, str):
            raise ValueError(f"Invalid color: {hex_color!r}")
        energy = data.get("chargedKWh")
        if energy is not None:
            energy = float(energy)
        return cls(
            id=str(data["id"]),
            date=date,
            mode=EVSEMode(mode_code),
            hex=hex_color,
            charged_kwh=energy,
        )
