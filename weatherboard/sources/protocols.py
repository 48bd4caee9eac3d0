"""Interfaces of the collaborators that feed the renderer."""

from typing import Optional, Protocol, runtime_checkable

from PIL import Image

from ..models import CurrentConditions, TeaserArticle, WeatherSeries


@runtime_checkable
class WeatherSource(Protocol):
    """Provides current conditions and an hourly forecast for one location."""

    def get_current(self) -> CurrentConditions: ...

    def get_forecast(self) -> WeatherSeries: ...


@runtime_checkable
class ArticleSource(Protocol):
    """Provides the newest article teaser, or None when there is nothing to show."""

    def get_latest(self) -> Optional[TeaserArticle]: ...


@runtime_checkable
class ImageFetcher(Protocol):
    """Downloads and decodes an image.

    Implementations raise ``ImageFetchError`` on any transport or decode
    failure.
    """

    def fetch(self, url: str) -> Image.Image: ...
