# smartevse_remote/services/color_resolver.py

from __future__ import annotations

from typing import Tuple

from smartevse_remote.models.mode import EVSEMode
from smartevse_remote.models.settings import DeviceSnapshot

DEFAULT_COLORS = {
    EVSEMode.NORMAL: "#00FF00",
    EVSEMode.SOLAR: "#FFFF00",
    EVSEMode.SMART: "#0000FF",
}
DEFAULT_OFF_COLOR = "#555555"

# Shown before the first successful read.
UNKNOWN_STATUS_HEX = "#808080"


def resolve_hex(mode: EVSEMode, snapshot: DeviceSnapshot) -> str:
    """Pick the device-reported color for a mode; OFF and PAUSE share the off color."""
    if mode is EVSEMode.NORMAL:
        reported = snapshot.color_normal
    elif mode is EVSEMode.SOLAR:
        reported = snapshot.color_solar
    elif mode is EVSEMode.SMART:
        reported = snapshot.color_smart
    else:
        reported = snapshot.color_off
    if reported:
        return reported
    return DEFAULT_COLORS.get(mode, DEFAULT_OFF_COLOR)


def hex_to_rgb(hex_color: str) -> Tuple[float, float, float]:
    digits = "".join(ch for ch in (hex_color or "") if ch.isalnum())
    try:
        value = int(digits, 16) if digits else 0
    except ValueError:
        value = 0
    r = ((value >> 16) & 0xFF) / 255
    g = ((value >> 8) & 0xFF) / 255
    b = (value & 0xFF) / 255
    return (r, g, b)
