# envoy_monitor/cli.py
import argparse


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return value


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return value


def build_parser():
    parser = argparse.ArgumentParser(
        prog="envoy-monitor",
        description="Enphase Envoy production/consumption reader"
    )

    parser.add_argument(
        "--config",
        default="envoy_monitor.conf",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress log output on stdout (cron-friendly)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    # One-shot reading
    sub.add_parser("read", help="Print the current production/consumption")

    # Periodic readings
    cmd_poll = sub.add_parser(
        "poll",
        help="Print a reading every interval until interrupted",
    )
    cmd_poll.add_argument(
        "--interval",
        type=_positive_float,
        help="Seconds between readings (overrides [poll] interval)",
    )
    cmd_poll.add_argument(
        "--count",
        type=_positive_int,
        help="Stop after this many readings",
    )

    # Token inspection
    cmd_token = sub.add_parser(
        "token",
        help="Show the cached Envoy token status",
    )
    cmd_token.add_argument(
        "--refresh",
        action="store_true",
        help="Discard the cached token and mint a new one",
    )

    sub.add_parser("clear-cache", help="Discard the cached Envoy token")

    return parser
