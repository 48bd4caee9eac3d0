"""Developer command line: render JSON snapshots through the dashboard pipeline."""

import argparse
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..config.settings import WeatherboardSettings, load_settings
from ..display.epaper.rendering.compositor import DashboardRenderer
from ..exceptions import ConfigurationError, RenderError
from ..models import DisplayData
from ..utils.logging import setup_logging
from .parser import create_parser

logger = logging.getLogger(__name__)


def load_snapshot(path: Path) -> DisplayData:
    """Read a ``DisplayData`` JSON snapshot.

    Raises:
        ConfigurationError: If the file cannot be read or does not validate
    """
    try:
        return DisplayData.model_validate_json(path.read_bytes())
    except OSError as e:
        raise ConfigurationError(f"Cannot read snapshot {path}: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Invalid snapshot {path}: {e}") from e


def _configure_logging(args: argparse.Namespace, settings: WeatherboardSettings) -> None:
    level = settings.logging.level
    if args.log_level:
        level = args.log_level
    if args.verbose:
        level = "DEBUG"
    log_file = args.log_file or settings.logging.file
    setup_logging(
        level=level,
        log_file=log_file,
        console=settings.logging.console,
        log_format=settings.logging.format,
    )


def run_render(args: argparse.Namespace, settings: WeatherboardSettings) -> int:
    """Handle ``weatherboard render``."""
    display_data = load_snapshot(args.snapshot)
    if args.no_teaser:
        display_data = display_data.model_copy(update={"article": None})

    with DashboardRenderer(settings) as renderer:
        frame = renderer.render_frame(display_data, now=args.now)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(frame.to_bytes())
    logger.info(f"Wrote {len(frame)} byte frame buffer to {args.output}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line interface.

    Args:
        argv: Arguments without the program name; ``sys.argv`` when None

    Returns:
        Process exit code: 0 on success, 1 on render failure, 2 on bad input
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        overrides = {}
        if getattr(args, "png", None):
            overrides["png_output_path"] = str(args.png)
        settings = load_settings(args.config, **overrides)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2

    _configure_logging(args, settings)

    try:
        if args.command == "render":
            return run_render(args, settings)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except RenderError as e:
        logger.error(f"Render failed: {e}")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 2


__all__ = ["create_parser", "load_snapshot", "main", "run_render"]
