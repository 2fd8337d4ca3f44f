import pytest

from smartevse_remote.models.mode import EVSEMode, resolve_mode
from smartevse_remote.models.settings import DeviceSnapshot
from smartevse_remote.services.color_resolver import hex_to_rgb, resolve_hex


@pytest.mark.parametrize(
    "code,expected",
    [
        (0, EVSEMode.OFF),
        (1, EVSEMode.NORMAL),
        (2, EVSEMode.SOLAR),
        (3, EVSEMode.SMART),
        (4, EVSEMode.PAUSE),
    ],
)
def test_resolve_mode_known_codes(code, expected):
    assert resolve_mode(code) is expected


@pytest.mark.parametrize("code", [-1, 5, 99, None, "1", 1.5, True])
def test_resolve_mode_falls_back_to_off(code):
    assert resolve_mode(code) is EVSEMode.OFF


def test_display_names_and_lookup():
    assert [m.display_name for m in EVSEMode] == ["OFF", "Normal", "Solar", "Smart", "Pause"]
    assert EVSEMode.from_name("solar") is EVSEMode.SOLAR
    assert EVSEMode.from_name(" Pause ") is EVSEMode.PAUSE
    with pytest.raises(ValueError):
        EVSEMode.from_name("turbo")


def test_resolve_hex_uses_reported_colors():
    snap = DeviceSnapshot(
        color_off="#111111",
        color_normal="#222222",
        color_solar="#333333",
        color_smart="#444444",
    )
    assert resolve_hex(EVSEMode.NORMAL, snap) == "#222222"
    assert resolve_hex(EVSEMode.SOLAR, snap) == "#333333"
    assert resolve_hex(EVSEMode.SMART, snap) == "#444444"
    assert resolve_hex(EVSEMode.OFF, snap) == "#111111"
    # Pause has no color of its own.
    assert resolve_hex(EVSEMode.PAUSE, snap) == "#111111"


def test_resolve_hex_defaults_when_colors_absent():
    snap = DeviceSnapshot()
    assert resolve_hex(EVSEMode.NORMAL, snap) == "#00FF00"
    assert resolve_hex(EVSEMode.SOLAR, snap) == "#FFFF00"
    assert resolve_hex(EVSEMode.SMART, snap) == "#0000FF"
    assert resolve_hex(EVSEMode.OFF, snap) == "#555555"
    assert resolve_hex(EVSEMode.PAUSE, snap) == "#555555"


def test_resolve_hex_treats_empty_string_as_missing():
    assert resolve_hex(EVSEMode.NORMAL, DeviceSnapshot(color_normal="")) == "#00FF00"


def test_hex_to_rgb_parses_channels():
    assert hex_to_rgb("#FF0000") == (1.0, 0.0, 0.0)
    assert hex_to_rgb("00ff00") == (0.0, 1.0, 0.0)
    r, g, b = hex_to_rgb("#555555")
    assert r == g == b == pytest.approx(0x55 / 255)


@pytest.mark.parametrize("raw", ["", "#", "not-a-color", "#GGHHII", "   ", "☃"])
def test_hex_to_rgb_degrades_to_black(raw):
    assert hex_to_rgb(raw) == (0.0, 0.0, 0.0)


def test_hex_to_rgb_short_values_stay_in_range():
    r, g, b = hex_to_rgb("#FFF")
    assert (r, g, b) == (0.0, pytest.approx(0x0F / 255), 1.0)
