"""Unit tests for the collaborator protocols."""

from datetime import datetime, timezone
from typing import Optional

from weatherboard.models import CurrentConditions, TeaserArticle, WeatherSeries
from weatherboard.sources.protocols import ArticleSource, ImageFetcher, WeatherSource


class StaticWeatherSource:
    def get_current(self) -> CurrentConditions:
        return CurrentConditions(timestamp=datetime(2024, 5, 6, tzinfo=timezone.utc), temperature=8.0)

    def get_forecast(self) -> WeatherSeries:
        return WeatherSeries([])


class EmptyArticleSource:
    def get_latest(self) -> Optional[TeaserArticle]:
        return None


class TestProtocols:
    """Tests for structural typing of the collaborators."""

    def test_weather_source_when_methods_present_then_instance_check_passes(self) -> None:
        """Test a plain class satisfies WeatherSource."""
        assert isinstance(StaticWeatherSource(), WeatherSource)

    def test_article_source_when_methods_present_then_instance_check_passes(self) -> None:
        """Test a plain class satisfies ArticleSource."""
        assert isinstance(EmptyArticleSource(), ArticleSource)

    def test_protocols_when_methods_missing_then_instance_check_fails(self) -> None:
        """Test unrelated objects are not mistaken for collaborators."""
        assert not isinstance(EmptyArticleSource(), WeatherSource)
        assert not isinstance(StaticWeatherSource(), ImageFetcher)
