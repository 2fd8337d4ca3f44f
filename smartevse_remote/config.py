# smartevse_remote/config.py
from dataclasses import dataclass, field
from pathlib import Path
import configparser


@dataclass
class DeviceConfig:
    host: str = "192.168.1.100"
    timeout: float = 10.0


@dataclass
class PollingConfig:
    interval_seconds: float = 10.0
    reboot_settle_seconds: float = 1.0


@dataclass
class HistoryConfig:
    limit: int = 50


@dataclass
class NotificationsConfig:
    title: str = "SmartEVSE mode changed"


@dataclass
class PushoverConfig:
    token: str | None = None
    user: str | None = None
    enabled: bool = False


@dataclass
class StateConfig:
    path: str | None = None


@dataclass
class LoggingConfig:
    console_level: str = "INFO"
    console_quiet: bool = False
    debug_modules: list[str] = field(default_factory=list)
    structured_enabled: bool = False
    structured_path: str | None = None


@dataclass
class AppConfig:
    device: DeviceConfig = field(default_factory=DeviceConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)
    pushover: PushoverConfig = field(default_factory=PushoverConfig)
    state: StateConfig = field(default_factory=StateConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class Config:
    def __init__(self, path: str):
        self.path = Path(path)
        self.parser = configparser.ConfigParser(inline_comment_prefixes=("#",))
        read = self.parser.read(self.path)
        if not read:
            raise FileNotFoundError(f"Config file not found: {self.path}")

    @classmethod
    def defaults(cls) -> AppConfig:
        return AppConfig()

    @classmethod
    def load(cls, path: str) -> AppConfig:
        cfg = cls(path)

        p = cfg.parser

        def _as_bool(value: str) -> bool:
            return value.strip().lower() == "true"

        def _positive_float(sec, key: str) -> float:
            value = float(sec[key])
            if value <= 0:
                raise ValueError(f"[{sec.name}] {key} must be positive")
            return value

        # --- Device ---
        device_kwargs = {}
        if "device" in p:
            device_sec = p["device"]
            if "host" in device_sec:
                device_kwargs["host"] = device_sec["host"].strip()
            if "timeout" in device_sec:
                device_kwargs["timeout"] = _positive_float(device_sec, "timeout")
        device_cfg = DeviceConfig(**device_kwargs)

        # --- Polling ---
        polling_kwargs = {}
        if "polling" in p:
            polling_sec = p["polling"]
            if "interval_seconds" in polling_sec:
                polling_kwargs["interval_seconds"] = _positive_float(polling_sec, "interval_seconds")
            if "reboot_settle_seconds" in polling_sec:
                settle = float(polling_sec["reboot_settle_seconds"])
                if settle < 0:
                    raise ValueError("[polling] reboot_settle_seconds must not be negative")
                polling_kwargs["reboot_settle_seconds"] = settle
        polling_cfg = PollingConfig(**polling_kwargs)

        # --- History ---
        history_kwargs = {}
        if "history" in p and "limit" in p["history"]:
            limit = int(p["history"]["limit"])
            if limit <= 0:
                raise ValueError("[history] limit must be positive")
            history_kwargs["limit"] = limit
        history_cfg = HistoryConfig(**history_kwargs)

        # --- Notifications ---
        notifications_kwargs = {}
        if "notifications" in p and "title" in p["notifications"]:
            notifications_kwargs["title"] = p["notifications"]["title"]
        notifications_cfg = NotificationsConfig(**notifications_kwargs)

        # --- Pushover ---
        pushover_kwargs = {}
        if "pushover" in p:
            pushover_sec = p["pushover"]
            if "token" in pushover_sec:
                pushover_kwargs["token"] = pushover_sec["token"]
            if "user" in pushover_sec:
                pushover_kwargs["user"] = pushover_sec["user"]
            if "enabled" in pushover_sec:
                pushover_kwargs["enabled"] = _as_bool(pushover_sec["enabled"])
        pushover = PushoverConfig(**pushover_kwargs)

        # --- State ---
        state_kwargs = {}
        if "state" in p and "path" in p["state"]:
            state_kwargs["path"] = p["state"]["path"]
        state_cfg = StateConfig(**state_kwargs)

        logging_kwargs = {}
        if "logging" in p:
            logging_sec = p["logging"]
            if "console_level" in logging_sec:
                logging_kwargs["console_level"] = logging_sec["console_level"]
            if "console_quiet" in logging_sec:
                logging_kwargs["console_quiet"] = _as_bool(logging_sec["console_quiet"])
            if "debug_modules" in logging_sec:
                raw = logging_sec["debug_modules"]
                logging_kwargs["debug_modules"] = [x.strip() for x in raw.split(",") if x.strip()]
            if "structured_enabled" in logging_sec:
                logging_kwargs["structured_enabled"] = _as_bool(logging_sec["structured_enabled"])
            if "structured_path" in logging_sec:
                logging_kwargs["structured_path"] = logging_sec["structured_path"]
        logging_cfg = LoggingConfig(**logging_kwargs)

        return AppConfig(
            device=device_cfg,
            polling=polling_cfg,
            history=history_cfg,
            notifications=notifications_cfg,
            pushover=pushover,
            state=state_cfg,
            logging=logging_cfg,
        )
