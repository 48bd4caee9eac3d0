"""Utility functions and helpers package."""

from .logging import get_log_level, setup_logging, setup_logging_from_settings

__all__ = [
    "get_log_level",
    "setup_logging",
    "setup_logging_from_settings",
]
