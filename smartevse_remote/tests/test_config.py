import pytest

from smartevse_remote.config import Config

CONF = """
[device]
host = 10.0.0.5   # garage charger
timeout = 4

[polling]
interval_seconds = 30
reboot_settle_seconds = 2.5

[history]
limit = 20

[pushover]
token = TOKEN
user = USER
enabled = true

[logging]
console_level = debug
debug_modules = smartevse.history, urllib3
"""


def test_full_config(tmp_path):
    conf_path = tmp_path / "evse.conf"
    conf_path.write_text(CONF)
    cfg = Config.load(str(conf_path))

    assert cfg.device.host == "10.0.0.5"
    assert cfg.device.timeout == 4.0
    assert cfg.polling.interval_seconds == 30.0
    assert cfg.polling.reboot_settle_seconds == 2.5
    assert cfg.history.limit == 20
    assert cfg.pushover.enabled is True
    assert cfg.pushover.token == "TOKEN"
    assert cfg.logging.debug_modules == ["smartevse.history", "urllib3"]
    assert cfg.notifications.title == "SmartEVSE mode changed"


def test_empty_config_uses_defaults(tmp_path):
    conf_path = tmp_path / "evse.conf"
    conf_path.write_text("")
    cfg = Config.load(str(conf_path))

    assert cfg == Config.defaults()
    assert cfg.history.limit == 50
    assert cfg.polling.interval_seconds == 10.0


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(str(tmp_path / "absent.conf"))


@pytest.mark.parametrize(
    "body",
    [
        "[history]\nlimit = 0\n",
        "[device]\ntimeout = -1\n",
        "[polling]\nreboot_settle_seconds = -1\n",
    ],
)
def test_invalid_values_raise(tmp_path, body):
    conf_path = tmp_path / "evse.conf"
    conf_path.write_text(body)
    with pytest.raises(ValueError):
        Config.load(str(conf_path))
