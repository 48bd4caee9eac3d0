"""Shared fixtures for the weatherboard test suite."""

import os
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional

import pytest
import pytz
from PIL import Image

from weatherboard.config.settings import WeatherboardSettings
from weatherboard.display.epaper.rendering.text import FontFace
from weatherboard.models import (
    Condition,
    CurrentConditions,
    DisplayData,
    TeaserArticle,
    WeatherSample,
    WeatherSeries,
)

BERLIN = pytz.timezone("Europe/Berlin")


@pytest.fixture(scope="session")
def font_face() -> FontFace:
    """Pillow's embedded scalable font, shared across the session."""
    return FontFace.builtin()


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> WeatherboardSettings:
    """Default settings, isolated from the environment and any YAML file."""
    for key in list(os.environ):
        if key.upper().startswith("WEATHERBOARD_"):
            monkeypatch.delenv(key, raising=False)
    return WeatherboardSettings(_load_yaml=False)


@pytest.fixture
def make_series() -> Callable[..., WeatherSeries]:
    """Factory for hourly series starting at 2024-05-06 00:00 Berlin time (a Monday)."""

    def _make(
        temperatures: list[Optional[float]],
        precipitations: Optional[list[Optional[float]]] = None,
        start: Optional[datetime] = None,
        step: timedelta = timedelta(hours=1),
    ) -> WeatherSeries:
        if precipitations is None:
            precipitations = [0.0] * len(temperatures)
        if start is None:
            start = BERLIN.localize(datetime(2024, 5, 6, 0, 0))
        samples = [
            WeatherSample(
                timestamp=start + step * index,
                temperature=temperature,
                precipitation=precipitation,
                condition=Condition.DRY,
            )
            for index, (temperature, precipitation) in enumerate(zip(temperatures, precipitations))
        ]
        return WeatherSeries(samples)

    return _make


@pytest.fixture
def week_series(make_series: Callable[..., WeatherSeries]) -> WeatherSeries:
    """Five days of 3-hourly samples with a daily temperature swing and some rain."""
    temperatures = [float(8 + (index % 8) * 2) for index in range(40)]
    precipitations = [float(index % 5) * 0.6 for index in range(40)]
    return make_series(temperatures, precipitations, step=timedelta(hours=3))


@pytest.fixture
def current_conditions() -> CurrentConditions:
    return CurrentConditions(
        timestamp=BERLIN.localize(datetime(2024, 5, 6, 14, 0)),
        temperature=21.0,
        condition=Condition.RAIN,
        relative_humidity=65.0,
        wind_speed=12.4,
    )


@pytest.fixture
def teaser_article() -> TeaserArticle:
    return TeaserArticle(
        title="A remarkably long headline that will not fit on one line",
        summary=(
            "The summary of the article goes on for a while so that the auto-fit "
            "search has to shrink it to make it fit into the box next to the photo."
        ),
        image_url="https://example.com/photo.jpg",
        subject="Some Subject",
    )


@pytest.fixture
def display_data(
    current_conditions: CurrentConditions, week_series: WeatherSeries
) -> DisplayData:
    """Display data without a teaser article."""
    return DisplayData(current=current_conditions, forecast=list(week_series))


@pytest.fixture
def render_time() -> datetime:
    """A moment inside the week_series forecast."""
    return BERLIN.localize(datetime(2024, 5, 6, 14, 10))


class FakeImageFetcher:
    """Image fetcher returning a fixed image and recording requested URLs."""

    def __init__(self, image: Optional[Image.Image] = None) -> None:
        self.image = image or Image.new("RGB", (320, 200), (90, 90, 90))
        self.urls: list[str] = []

    def fetch(self, url: str) -> Image.Image:
        self.urls.append(url)
        return self.image.copy()


@pytest.fixture
def fake_fetcher() -> FakeImageFetcher:
    return FakeImageFetcher()
