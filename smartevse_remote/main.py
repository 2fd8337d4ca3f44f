# smartevse_remote/main.py

from datetime import datetime
from pathlib import Path
import logging
import sys
import time

from .cli import build_parser
from .config import Config
from .logging import ConsoleLog, StructuredLog
from .models.mode import EVSEMode

from .services.app_state import AppState
from .services.evse_client import SmartEVSEClient
from .services.history_store import HistoryStore
from .services.notification_manager import NotificationManager
from .services.output_formatter import emit_history, emit_status
from .services.preferences import Preferences
from .services.sync_service import SyncService

NO_HOST_MESSAGE = "no charger address; use --host or 'prefs --set-host'"


def _load_config(path: str, parser, default_path: str):
    # A missing default config file means "run with defaults".
    if path == default_path and not Path(path).exists():
        return Config.defaults()
    try:
        return Config.load(path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))


def _parse_start(raw: str, parser) -> datetime:
    try:
        start = datetime.fromisoformat(raw)
    except ValueError:
        parser.error(f"invalid start time: {raw!r}")
    if start.tzinfo is None:
        start = start.astimezone()
    return start


def build_service(app_cfg, log, state: AppState) -> SyncService:
    client = SmartEVSEClient(log, timeout=app_cfg.device.timeout)
    history = HistoryStore(state, limit=app_cfg.history.limit)
    notifier = NotificationManager(app_cfg.pushover, log)
    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )
    return SyncService(
        client,
        history,
        notifier,
        log,
        notification_title=app_cfg.notifications.title,
        structured_log=structured_logger,
        reboot_settle_seconds=app_cfg.polling.reboot_settle_seconds,
    )


def run_watch(service: SyncService, host: str, interval: float, count, as_json: bool, log) -> None:
    def _on_change(state):
        log.debug("State updated: mode=%s color=%s", state.current_mode.name, state.status_hex)

    unsubscribe = service.subscribe(_on_change)
    polls = 0
    try:
        while count is None or polls < count:
            if service.refresh(host, wait=False):
                emit_status(host, service.state, as_json=as_json)
            polls += 1
            if count is not None and polls >= count:
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        log.info("Stopped watching %s", host)
    finally:
        unsubscribe()


def run_command(args, service: SyncService, prefs: Preferences, host: str, parser) -> bool:
    command = args.command
    if command == "mode":
        ok = service.set_mode(host, EVSEMode.from_name(args.mode))
    elif command == "on":
        ok = service.set_mode(host, prefs.on_mode)
    elif command == "off":
        ok = service.set_mode(host, EVSEMode.OFF)
    elif command == "current":
        ok = service.set_override_current(host, args.amps)
    elif command == "schedule":
        mode = EVSEMode.from_name(args.mode) if args.mode else prefs.on_mode
        ok = service.set_start_time(host, _parse_start(args.start, parser), mode)
    elif command in ("lock", "unlock"):
        ok = service.set_cable_lock(host, command == "lock")
    elif command == "reboot":
        ok = service.reboot(host)
        emit_status(host, service.state, as_json=args.json)
        return ok
    else:
        raise ValueError(f"Unsupported command: {command}")

    service.refresh(host)
    emit_status(host, service.state, as_json=args.json)
    return ok


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    app_cfg = _load_config(args.config, parser, parser.get_default("config"))
    console_logger = ConsoleLog(
        level="DEBUG" if args.debug else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    if args.debug:
        logging.getLogger("urllib3").setLevel(logging.INFO)

    state = AppState(path=app_cfg.state.path)
    prefs = Preferences(state, default_host=app_cfg.device.host)
    service = build_service(app_cfg, log, state)
    host = (args.host or prefs.host).strip()

    ok = True
    try:
        if args.command == "status":
            ok = service.refresh(host)
            emit_status(host, service.state, as_json=args.json)
        elif args.command == "watch":
            if not host:
                parser.error(NO_HOST_MESSAGE)
            interval = args.interval if args.interval is not None else app_cfg.polling.interval_seconds
            run_watch(service, host, interval, args.count, args.json, log)
        elif args.command == "history":
            emit_history(service.state.history, as_json=args.json, full=args.all, limit=args.limit)
        elif args.command == "history-clear":
            service.clear_history()
            log.info("History cleared")
        elif args.command == "history-export":
            payload = service.export_history()
            if args.file:
                Path(args.file).expanduser().write_text(payload + "\n", encoding="utf-8")
                log.info("History exported to %s", args.file)
            else:
                print(payload)
        elif args.command == "history-import":
            try:
                text = Path(args.file).expanduser().read_text(encoding="utf-8")
                imported = service.import_history(text)
            except (OSError, ValueError) as exc:
                log.error("History import failed: %s", exc)
                return 1
            log.info("Imported %d history entries", imported)
        elif args.command == "prefs":
            if args.set_host is not None:
                prefs.host = args.set_host
            if args.set_on_mode:
                prefs.on_mode = EVSEMode.from_name(args.set_on_mode)
            print(f"Host:    {prefs.host or '(none)'}")
            print(f"On mode: {prefs.on_mode.display_name}")
        elif args.command == "notify-test":
            service.notifier.send_test_notifications()
        else:
            if not host:
                parser.error(NO_HOST_MESSAGE)
            ok = run_command(args, service, prefs, host, parser)
    finally:
        state.close()

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
