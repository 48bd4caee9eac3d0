"""Command-line argument parsing for weatherboard."""

import argparse
from datetime import datetime
from pathlib import Path

from .. import __version__

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 date-time for ``--now``.

    Raises:
        argparse.ArgumentTypeError: If the value is not ISO 8601
    """
    try:
        return datetime.fromisoformat(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(
            f"Invalid date-time: {value}. Use ISO 8601, e.g. 2024-05-04T14:20:00+02:00"
        ) from err


def create_parser() -> argparse.ArgumentParser:
    """Create the command line argument parser.

    Returns:
        argparse.ArgumentParser with the ``render`` subcommand
    """
    parser = argparse.ArgumentParser(
        prog="weatherboard",
        description="Render weather dashboards for tri-color e-Paper displays",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s render snapshot.json -o frame.bin             # Render a frame buffer
  %(prog)s render snapshot.json -o frame.bin --png p.png # Also save a preview
  %(prog)s --config my.yaml render snapshot.json -o f.bin
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show version"
    )
    parser.add_argument("--config", type=Path, help="YAML settings file")

    logging_group = parser.add_argument_group("logging", "Logging options")
    logging_group.add_argument("--log-level", choices=LOG_LEVELS, help="Console log level")
    logging_group.add_argument("--log-file", type=Path, help="Also log to this file")
    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Shortcut for --log-level DEBUG"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser(
        "render",
        help="Render a JSON snapshot of display data",
        description="Render a DisplayData JSON snapshot into the controller's frame buffer",
    )
    render.add_argument("snapshot", type=Path, help="JSON file with current, forecast, article")
    render.add_argument(
        "--output", "-o", type=Path, required=True, help="Where to write the frame buffer"
    )
    render.add_argument("--png", type=Path, help="Also write a PNG preview here")
    render.add_argument(
        "--now",
        type=parse_datetime,
        help="Render as if it were this time (ISO 8601, default: current time)",
    )
    render.add_argument(
        "--no-teaser", action="store_true", help="Ignore the article in the snapshot"
    )

    return parser


__all__ = [
    "LOG_LEVELS",
    "create_parser",
    "parse_datetime",
]
