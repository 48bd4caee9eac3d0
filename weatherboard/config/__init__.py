"""Configuration for the dashboard renderer."""

from .settings import (
    GraphSettings,
    LabelSettings,
    LoggingSettings,
    TeaserSettings,
    WeatherboardSettings,
    load_settings,
)

__all__ = [
    "GraphSettings",
    "LabelSettings",
    "LoggingSettings",
    "TeaserSettings",
    "WeatherboardSettings",
    "load_settings",
]
