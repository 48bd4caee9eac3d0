"""Logging setup for the weatherboard package."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

from ..config.settings import LoggingSettings

ROOT_LOGGER_NAME = "weatherboard"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


def get_log_level(level: Union[int, str]) -> int:
    """Convert a level name such as "debug" to its numeric value, defaulting to INFO."""
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: Union[int, str] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Set up package logging with console and optional file output.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; parent directories are created
        console: Whether to log to stdout
        log_format: Format of console records

    Returns:
        The configured "weatherboard" logger
    """
    numeric_level = get_log_level(level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter(log_format, datefmt="%H:%M:%S"))
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Rotate so a device running for months doesn't fill its storage
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)

    logger.debug(f"Logging initialized at {logging.getLevelName(numeric_level)} level")
    return logger


def setup_logging_from_settings(settings: LoggingSettings) -> logging.Logger:
    """Apply a ``LoggingSettings`` section."""
    return setup_logging(
        level=settings.level,
        log_file=settings.file,
        console=settings.console,
        log_format=settings.format,
    )
