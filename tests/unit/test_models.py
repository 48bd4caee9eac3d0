"""Unit tests for the weather and teaser data models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from weatherboard.exceptions import DegenerateInputError, MissingFieldError
from weatherboard.models import (
    Condition,
    CurrentConditions,
    DisplayData,
    TeaserArticle,
    WeatherSample,
    WeatherSeries,
)

NOON = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)


def sample(temperature=10.0, precipitation=0.0) -> WeatherSample:
    return WeatherSample(timestamp=NOON, temperature=temperature, precipitation=precipitation)


class TestCondition:
    """Tests for the Condition enum."""

    def test_condition_when_parsed_from_string_then_matches_member(self) -> None:
        """Test API condition codes map onto members."""
        assert Condition("thunderstorm") is Condition.THUNDERSTORM
        assert Condition("null") is Condition.NULL

    def test_condition_when_unknown_code_then_value_error(self) -> None:
        """Test unknown codes are rejected."""
        with pytest.raises(ValueError):
            Condition("tornado")


class TestCurrentConditions:
    """Tests for CurrentConditions."""

    def test_require_temperature_when_present_then_returned(self) -> None:
        """Test the temperature is returned unchanged."""
        current = CurrentConditions(timestamp=NOON, temperature=-3.5)

        assert current.require_temperature() == -3.5

    def test_require_temperature_when_absent_then_missing_field_error(self) -> None:
        """Test an absent temperature raises with field and context."""
        current = CurrentConditions(timestamp=NOON)

        with pytest.raises(MissingFieldError) as exc_info:
            current.require_temperature()

        assert exc_info.value.field == "temperature"
        assert exc_info.value.context == "current conditions"

    def test_current_conditions_when_assigned_then_frozen(self) -> None:
        """Test model instances are immutable."""
        current = CurrentConditions(timestamp=NOON, temperature=5.0)

        with pytest.raises(ValidationError):
            current.temperature = 6.0


class TestWeatherSeries:
    """Tests for WeatherSeries."""

    def test_series_when_indexed_then_behaves_like_sequence(self) -> None:
        """Test length, iteration and indexing."""
        series = WeatherSeries([sample(1.0), sample(2.0), sample(3.0)])

        assert len(series) == 3
        assert [s.temperature for s in series] == [1.0, 2.0, 3.0]
        assert series[1].temperature == 2.0
        assert [s.temperature for s in series[1:]] == [2.0, 3.0]
        assert repr(series) == "WeatherSeries(samples=3)"

    def test_temperature_range_when_values_present_then_min_and_max(self) -> None:
        """Test the extremes of the whole series."""
        series = WeatherSeries([sample(4.0), sample(-2.0), sample(11.5)])

        assert series.temperature_range() == (-2.0, 11.5)

    def test_max_precipitation_when_values_present_then_highest(self) -> None:
        """Test the wettest hour."""
        series = WeatherSeries([sample(precipitation=0.2), sample(precipitation=1.4)])

        assert series.max_precipitation() == 1.4

    def test_precipitations_when_value_missing_then_missing_field_error(self) -> None:
        """Test an absent precipitation names its sample."""
        series = WeatherSeries([sample(), sample(precipitation=None)])

        with pytest.raises(MissingFieldError, match="forecast sample 1"):
            series.precipitations()

    def test_temperature_range_when_empty_then_degenerate_input_error(self) -> None:
        """Test an empty series has no range."""
        with pytest.raises(DegenerateInputError):
            WeatherSeries([]).temperature_range()

    @pytest.mark.parametrize(("length", "minimum"), [(0, 2), (1, 2), (3, 4), (1, 0)])
    def test_require_graphable_when_too_short_then_degenerate_input_error(
        self, length: int, minimum: int
    ) -> None:
        """Test series shorter than the minimum, and never less than two, are rejected."""
        series = WeatherSeries([sample()] * length)

        with pytest.raises(DegenerateInputError):
            series.require_graphable(minimum)

    def test_require_graphable_when_long_enough_then_passes(self) -> None:
        """Test a series of exactly the minimum length is accepted."""
        WeatherSeries([sample()] * 4).require_graphable(4)


class TestDisplayData:
    """Tests for DisplayData."""

    def test_model_validate_json_when_snapshot_given_then_parsed(self) -> None:
        """Test a JSON snapshot parses into models with enums and timestamps."""
        raw = """
        {
          "current": {"timestamp": "2024-05-06T14:00:00+02:00", "temperature": 21,
                      "condition": "rain", "relative_humidity": 65, "wind_speed": 12.4},
          "forecast": [
            {"timestamp": "2024-05-06T14:00:00+02:00", "temperature": 21, "precipitation": 0.4},
            {"timestamp": "2024-05-06T15:00:00+02:00", "temperature": 20, "precipitation": 1.1}
          ],
          "article": {"title": "T", "summary": "S", "image_url": "https://example.com/a.jpg"}
        }
        """

        data = DisplayData.model_validate_json(raw)

        assert data.current.condition is Condition.RAIN
        assert data.current.timestamp.utcoffset().total_seconds() == 7200
        assert len(data.series) == 2
        assert isinstance(data.article, TeaserArticle)
        assert data.article.subject is None

    def test_display_data_when_article_omitted_then_none(self) -> None:
        """Test the teaser article is optional."""
        data = DisplayData(current=CurrentConditions(timestamp=NOON), forecast=[])

        assert data.article is None
        assert len(data.series) == 0
