# smartevse_remote/models/mode.py
from __future__ import annotations

from enum import Enum
from typing import Any


class EVSEMode(Enum):
    OFF = 0
    NORMAL = 1
    SOLAR = 2
    SMART = 3
    PAUSE = 4

    @property
    def code(self) -> int:
        return self.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_name(cls, text: str) -> "EVSEMode":
        key = (text or "").strip().lower()
        for mode in cls:
            if key in (mode.name.lower(), mode.display_name.lower()):
                return mode
        raise ValueError(f"Unknown mode: {text!r}")


_DISPLAY_NAMES = {
    EVSEMode.OFF: "OFF",
    EVSEMode.NORMAL: "Normal",
    EVSEMode.SOLAR: "Solar",
    EVSEMode.SMART: "Smart",
    EVSEMode.PAUSE: "Pause",
}

# Modes the charger can be switched "on" into.
ON_MODES = (EVSEMode.NORMAL, EVSEMode.SMART, EVSEMode.SOLAR, EVSEMode.PAUSE)


def resolve_mode(code: Any) -> EVSEMode:
    """Map a device mode code to a mode; anything unrecognised is OFF."""
    if isinstance(code, bool) or not isinstance(code, int):
        return EVSEMode.OFF
    try:
        return EVSEMode(code)
    except ValueError:
        return EVSEMode.OFF
