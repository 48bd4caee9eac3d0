"""Data models for weather and teaser content rendered on the dashboard."""

from collections.abc import Iterable, Iterator
from datetime import datetime
from enum import Enum
from typing import Optional, overload

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import DegenerateInputError, MissingFieldError


class Condition(str, Enum):
    """Weather condition codes as reported by the Bright Sky API."""

    DRY = "dry"
    FOG = "fog"
    RAIN = "rain"
    SLEET = "sleet"
    SNOW = "snow"
    HAIL = "hail"
    THUNDERSTORM = "thunderstorm"
    NULL = "null"


class WeatherSample(BaseModel):
    """One hourly forecast record."""

    timestamp: datetime = Field(..., description="Start of the hour this sample describes")
    temperature: Optional[float] = Field(default=None, description="Air temperature in °C")
    precipitation: Optional[float] = Field(
        default=None, description="Precipitation during the previous hour in mm"
    )
    relative_humidity: Optional[float] = Field(default=None, description="Relative humidity in %")
    wind_speed: Optional[float] = Field(default=None, description="Mean wind speed in km/h")
    condition: Optional[Condition] = None

    model_config = ConfigDict(frozen=True)


class CurrentConditions(BaseModel):
    """Snapshot of the weather right now."""

    timestamp: datetime
    temperature: Optional[float] = None
    condition: Optional[Condition] = None
    relative_humidity: Optional[float] = None
    wind_speed: Optional[float] = None

    model_config = ConfigDict(frozen=True)

    def require_temperature(self) -> float:
        """Return the current temperature or raise if the source omitted it."""
        if self.temperature is None:
            raise MissingFieldError("temperature", "current conditions")
        return self.temperature


class TeaserArticle(BaseModel):
    """Article teaser shown in the lower part of the dashboard."""

    title: str
    summary: str
    image_url: str
    subject: Optional[str] = Field(default=None, description="Name of the article's subject")

    model_config = ConfigDict(frozen=True)


class WeatherSeries:
    """Chronologically ordered hourly forecast samples."""

    def __init__(self, samples: Iterable[WeatherSample]) -> None:
        self._samples: list[WeatherSample] = list(samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[WeatherSample]:
        return iter(self._samples)

    @overload
    def __getitem__(self, index: int) -> WeatherSample: ...

    @overload
    def __getitem__(self, index: slice) -> list[WeatherSample]: ...

    def __getitem__(self, index: int | slice) -> WeatherSample | list[WeatherSample]:
        return self._samples[index]

    def __repr__(self) -> str:
        return f"WeatherSeries(samples={len(self._samples)})"

    def temperatures(self) -> list[float]:
        """Return all temperatures, failing fast on the first absent value."""
        values = []
        for index, sample in enumerate(self._samples):
            if sample.temperature is None:
                raise MissingFieldError("temperature", f"forecast sample {index}")
            values.append(sample.temperature)
        return values

    def precipitations(self) -> list[float]:
        """Return all precipitation amounts, failing fast on the first absent value."""
        values = []
        for index, sample in enumerate(self._samples):
            if sample.precipitation is None:
                raise MissingFieldError("precipitation", f"forecast sample {index}")
            values.append(sample.precipitation)
        return values

    def temperature_range(self) -> tuple[float, float]:
        """Return (min, max) temperature of the whole series."""
        temperatures = self.temperatures()
        if not temperatures:
            raise DegenerateInputError(0, 1)
        return min(temperatures), max(temperatures)

    def max_precipitation(self) -> float:
        """Return the highest hourly precipitation of the series."""
        precipitations = self.precipitations()
        if not precipitations:
            raise DegenerateInputError(0, 1)
        return max(precipitations)

    def require_graphable(self, minimum: int = 2) -> None:
        """Reject series too short for the graph's (n - 1) spacing math.

        Args:
            minimum: Required number of samples, never less than 2

        Raises:
            DegenerateInputError: If the series has fewer samples
        """
        minimum = max(minimum, 2)
        if len(self._samples) < minimum:
            raise DegenerateInputError(len(self._samples), minimum)


class DisplayData(BaseModel):
    """Everything one render cycle draws."""

    current: CurrentConditions
    forecast: list[WeatherSample]
    article: Optional[TeaserArticle] = None

    model_config = ConfigDict(frozen=True)

    @property
    def series(self) -> WeatherSeries:
        """Forecast wrapped as a WeatherSeries."""
        return WeatherSeries(self.forecast)
