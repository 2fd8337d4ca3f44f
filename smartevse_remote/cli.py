# smartevse_remote/cli.py
import argparse

MODE_CHOICES = ("off", "normal", "solar", "smart", "pause")
ON_MODE_CHOICES = ("normal", "smart", "solar", "pause")
MIN_CURRENT = 6
MAX_CURRENT = 32


def _amps(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid current: {raw!r}")
    if not MIN_CURRENT <= value <= MAX_CURRENT:
        raise argparse.ArgumentTypeError(f"current must be between {MIN_CURRENT} and {MAX_CURRENT} A")
    return value


def _seconds(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval: {raw!r}")
    if not value > 0:
        raise argparse.ArgumentTypeError("interval must be a positive number of seconds")
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="smartevse-remote",
        description="Remote control for a SmartEVSE charging station"
    )

    parser.add_argument(
        "--config",
        default="smartevse_remote.conf",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--host",
        help="Charger address (overrides the stored preference)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress log output"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Read the charger once and show its state")

    cmd_watch = sub.add_parser("watch", help="Poll the charger on a fixed interval")
    cmd_watch.add_argument("--interval", type=_seconds, help="Seconds between polls")
    cmd_watch.add_argument("--count", type=int, help="Stop after this many polls")

    cmd_mode = sub.add_parser("mode", help="Switch the charging mode")
    cmd_mode.add_argument("mode", choices=MODE_CHOICES)

    sub.add_parser("on", help="Switch on using the preferred on mode")
    sub.add_parser("off", help="Switch the charger off")

    cmd_current = sub.add_parser("current", help="Override the charge current")
    cmd_current.add_argument("amps", type=_amps)

    cmd_schedule = sub.add_parser("schedule", help="Schedule a delayed start")
    cmd_schedule.add_argument("start", help="Start time, ISO format (e.g. 2025-10-18T07:30)")
    cmd_schedule.add_argument("--mode", choices=ON_MODE_CHOICES, help="Mode to start in")

    sub.add_parser("lock", help="Lock the charging cable")
    sub.add_parser("unlock", help="Unlock the charging cable")
    sub.add_parser("reboot", help="Reboot the SmartEVSE controller")

    cmd_history = sub.add_parser("history", help="Show recorded mode changes")
    cmd_history.add_argument("--all", action="store_true", help="Show dates as well as times")
    cmd_history.add_argument("--limit", type=int, help="Number of entries to show")

    sub.add_parser("history-clear", help="Delete the recorded history")

    cmd_export = sub.add_parser("history-export", help="Write the history as JSON")
    cmd_export.add_argument("file", nargs="?", help="Output file (stdout when omitted)")

    cmd_import = sub.add_parser("history-import", help="Replace the history from a JSON export")
    cmd_import.add_argument("file")

    cmd_prefs = sub.add_parser("prefs", help="Show or change stored preferences")
    cmd_prefs.add_argument("--set-host", help="Store the charger address")
    cmd_prefs.add_argument("--set-on-mode", choices=ON_MODE_CHOICES, help="Store the preferred on mode")

    sub.add_parser("notify-test", help="Send a test notification")

    return parser
