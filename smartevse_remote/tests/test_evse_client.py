# smartevse_remote/tests/test_evse_client.py

from datetime import datetime, timedelta, timezone

import requests

from smartevse_remote.models.settings import DeviceSnapshot
from smartevse_remote.services.evse_client import (
    Failure,
    SmartEVSEClient,
    build_query,
    format_timestamp,
)
from smartevse_remote.tests.fake_device import NOT_JSON, FakeSession
from smartevse_remote.util.logging import get_logger, setup_logging


setup_logging(debug=False)
LOG = get_logger("evse-client-test")


def test_read_decodes_settings():
    payload = {
        "mode": "Normal",
        "mode_id": 1,
        "override_current": 16,
        "color_normal": "#00AA00",
        "cablelock": 0,
    }
    session = FakeSession(get=[(200, payload)])
    client = SmartEVSEClient(LOG, session=session, timeout=5)

    snap = client.read("10.0.0.5")

    assert isinstance(snap, DeviceSnapshot)
    assert snap.mode_label == "Normal"
    assert snap.mode_code == 1
    assert snap.override_current == 16
    assert snap.color_normal == "#00AA00"
    assert snap.cablelock == 0
    assert snap.charged_kwh is None
    assert session.calls == [{"method": "GET", "url": "http://10.0.0.5/settings", "timeout": 5}]


def test_integer_mode_field_is_accepted_as_code():
    session = FakeSession(get=[(200, {"mode": 3})])
    snap = SmartEVSEClient(LOG, session=session).read("evse.local")
    assert snap.mode_code == 3
    assert snap.mode_label is None


def test_malformed_fields_are_treated_as_missing():
    payload = {
        "mode": "Solar",
        "mode_id": "two",
        "override_current": "lots",
        "color_solar": 12,
        "cablelock": True,
        "charged_kwh": "3.4",
    }
    session = FakeSession(get=[(200, payload)])
    snap = SmartEVSEClient(LOG, session=session).read("evse.local")

    assert snap.mode_label == "Solar"
    assert snap.mode_code is None
    assert snap.override_current is None
    assert snap.color_solar is None
    assert snap.cablelock == 1
    assert snap.charged_kwh is None


def test_apply_posts_query_with_empty_body():
    session = FakeSession(post=[(200, {"mode": "Smart", "mode_id": 3})])
    client = SmartEVSEClient(LOG, session=session)

    result = client.apply("10.0.0.5", {"mode": 3, "override_current": 10})

    assert isinstance(result, DeviceSnapshot)
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://10.0.0.5/settings?mode=3&override_current=10"
    assert call["data"] == b""
    assert call["headers"] == {"Content-Type": "application/x-www-form-urlencoded"}


def test_http_error_reports_status():
    session = FakeSession(post=[(500, NOT_JSON)])
    result = SmartEVSEClient(LOG, session=session).apply("10.0.0.5", {"reboot": "1"})

    assert isinstance(result, Failure)
    assert result.kind == "http"
    assert result.status_code == 500
    assert "500" in result.message
    assert result.completed


def test_transport_error_is_reported_not_raised():
    session = FakeSession(get=[requests.ConnectionError("connection refused")])
    result = SmartEVSEClient(LOG, session=session).read("10.0.0.5")

    assert isinstance(result, Failure)
    assert result.kind == "transport"
    assert "connection refused" in result.message
    assert not result.completed


def test_non_json_body_is_decode_failure():
    session = FakeSession(get=[(200, NOT_JSON)])
    result = SmartEVSEClient(LOG, session=session).read("10.0.0.5")

    assert isinstance(result, Failure)
    assert result.kind == "decode"
    assert result.completed


def test_json_array_body_is_decode_failure():
    session = FakeSession(get=[(200, [1, 2, 3])])
    result = SmartEVSEClient(LOG, session=session).read("10.0.0.5")
    assert isinstance(result, Failure)
    assert result.kind == "decode"


def test_blank_host_makes_no_request():
    session = FakeSession()
    client = SmartEVSEClient(LOG, session=session)

    result = client.apply("   ", {"mode": 4})

    assert isinstance(result, Failure)
    assert result.kind == "invalid_target"
    assert session.calls == []


def test_build_query_formats_values():
    start = datetime(2025, 10, 18, 9, 30, tzinfo=timezone(timedelta(hours=2)))
    query = build_query({"starttime": start, "mode": 1, "cablelock": True})
    assert query == "starttime=2025-10-18T07:30:00.000Z&mode=1&cablelock=1"


def test_build_query_escapes_separators():
    assert build_query({"note": "a&b=c"}) == "note=a%26b%3Dc"


def test_format_timestamp_keeps_milliseconds():
    when = datetime(2025, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
    assert format_timestamp(when) == "2025-01-02T03:04:05.678Z"
