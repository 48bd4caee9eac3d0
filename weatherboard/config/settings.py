"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional, Union

import pytz
import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError
from ..models import Condition

logger = logging.getLogger(__name__)

ENV_PREFIX = "WEATHERBOARD_"
ENV_NESTED_DELIMITER = "__"

DitherMode = Literal["floyd_steinberg", "ordered", "threshold"]

SECTIONS = ("labels", "graph", "teaser", "logging")


class LabelSettings(BaseModel):
    """Strings drawn on the dashboard, so they can be swapped for another language."""

    model_config = ConfigDict(validate_assignment=True)

    weekday_names: list[str] = Field(
        default_factory=lambda: ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
        description="Graph labels for Monday through Sunday",
    )
    dry: str = Field(default="Dry", description="Label for the 'dry' condition")
    fog: str = Field(default="Fog", description="Label for the 'fog' condition")
    rain: str = Field(default="Rain", description="Label for the 'rain' condition")
    sleet: str = Field(default="Sleet", description="Label for the 'sleet' condition")
    snow: str = Field(default="Snow", description="Label for the 'snow' condition")
    hail: str = Field(default="Hail", description="Label for the 'hail' condition")
    thunderstorm: str = Field(default="Thunderstorm", description="Label for thunderstorms")
    null: str = Field(default="Unknown", description="Label when no condition is reported")

    @field_validator("weekday_names")
    @classmethod
    def _seven_weekdays(cls, value: list[str]) -> list[str]:
        if len(value) != 7:
            raise ValueError(f"weekday_names needs 7 entries, got {len(value)}")
        return value

    def condition_label(self, condition: Optional[Condition]) -> str:
        """Label for a condition code; an absent condition uses the 'null' label."""
        if condition is None:
            condition = Condition.NULL
        return str(getattr(self, condition.value))


class GraphSettings(BaseModel):
    """Placement and axis policy of the forecast graph."""

    model_config = ConfigDict(validate_assignment=True)

    x: int = Field(default=50, description="Left edge of the graph on the canvas")
    y: int = Field(default=100, description="Top edge of the graph on the canvas")
    width: int = Field(default=700, gt=1, description="Graph width in pixels")
    height: int = Field(default=200, gt=1, description="Graph height in pixels")
    temp_floor: int = Field(default=0, description="Temperature axis always reaches down to this")
    temp_ceiling: int = Field(default=20, description="Temperature axis always reaches up to this")
    rain_ceiling: int = Field(default=5, gt=0, description="Rain axis always reaches up to this")
    label_scale: float = Field(default=24.0, gt=0, description="Axis label font size")
    label_true_extremes: bool = Field(
        default=True,
        description="Label a widened axis with the rounded data extreme instead of the bound",
    )


class TeaserSettings(BaseModel):
    """Layout of the article teaser under the graph."""

    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = Field(default=True, description="Draw the teaser when an article is given")
    padding: int = Field(default=15, ge=0, description="Padding around image and text")
    image_aspect_ratio: float = Field(default=1.76, gt=0, description="Image width / height")
    title_start_scale: float = Field(default=28.0, gt=0, description="Largest title font size")
    title_max_lines: int = Field(default=2, ge=1, description="Lines the title may wrap into")
    title_line_spacing: float = Field(default=5.0, ge=0)
    subject_line_spacing: float = Field(default=4.0, ge=0)
    summary_line_spacing: float = Field(default=3.0, ge=0)


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    model_config = ConfigDict(validate_assignment=True)

    level: str = Field(default="INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    console: bool = Field(default=True, description="Log to stdout")
    file: Optional[str] = Field(default=None, description="Optional log file path")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format",
    )


class WeatherboardSettings(BaseSettings):
    """Renderer settings with environment variable and YAML file support.

    Precedence, highest first: keyword arguments, ``WEATHERBOARD_*``
    environment variables, the YAML file, field defaults. Nested sections can
    be set from the environment with a double underscore, e.g.
    ``WEATHERBOARD_GRAPH__TEMP_CEILING=25``.
    """

    _explicit_args: set = PrivateAttr(default_factory=set)
    _env_vars_set: set = PrivateAttr(default_factory=set)
    _config_file: Optional[Path] = PrivateAttr(default=None)

    # Time
    timezone: str = Field(default="Europe/Berlin", description="IANA timezone for the clock")
    time_format: str = Field(default="%H:%M", description="strftime format of the header clock")

    # Rendering
    alert_temperature: float = Field(
        default=27.0, description="Current temperature at or above this is drawn in red"
    )
    font_path: Optional[str] = Field(
        default=None, description="TrueType/OpenType font; Pillow's built-in font when unset"
    )
    dither_mode: DitherMode = Field(
        default="floyd_steinberg", description="Dithering for the teaser photo"
    )
    min_forecast_points: int = Field(
        default=4, ge=2, description="Minimum forecast samples needed to render"
    )
    png_output_path: Optional[str] = Field(
        default=None, description="Write a PNG preview of every render here"
    )

    # Network
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    # Sections
    labels: LabelSettings = Field(default_factory=LabelSettings)
    graph: GraphSettings = Field(default_factory=GraphSettings)
    teaser: TeaserSettings = Field(default_factory=TeaserSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_NESTED_DELIMITER,
        case_sensitive=False,
        validate_assignment=True,
    )

    def __init__(self, **kwargs: Any) -> None:
        """Build settings from arguments, environment and YAML.

        Keyword-only extras:
            _config_file: Explicit YAML file; it must exist
            _load_yaml: Set to False to skip YAML lookup entirely

        Raises:
            ConfigurationError: If any value fails validation or an explicit
                config file is missing
        """
        config_file = kwargs.pop("_config_file", None)
        load_yaml = kwargs.pop("_load_yaml", True)

        env_vars_set = {
            key[len(ENV_PREFIX) :].lower() for key in os.environ if key.upper().startswith(ENV_PREFIX)
        }

        try:
            super().__init__(**kwargs)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid settings: {e}") from e

        self._explicit_args = set(kwargs.keys())
        self._env_vars_set = env_vars_set

        if config_file is not None:
            self._config_file = Path(config_file).expanduser()
            if not self._config_file.exists():
                raise ConfigurationError(f"Config file not found: {self._config_file}")
        elif load_yaml:
            self._config_file = self._find_config_file()

        if self._config_file is not None:
            self._load_yaml_config(self._config_file)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @property
    def tzinfo(self) -> pytz.BaseTzInfo:
        """The configured timezone as a pytz object."""
        return pytz.timezone(self.timezone)

    @property
    def config_file(self) -> Optional[Path]:
        """YAML file the settings were loaded from, if any."""
        return self._config_file

    def _find_config_file(self) -> Optional[Path]:
        """Find config file, checking project directory first, then user home."""
        project_root = Path(__file__).parent.parent.parent
        project_config = project_root / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        user_config = Path.home() / ".config" / "weatherboard" / "config.yaml"
        if user_config.exists():
            return user_config

        return None

    def _is_overridden(self, name: str) -> bool:
        return name in self._explicit_args or name in self._env_vars_set

    def _load_top_level(self, config_data: dict) -> None:
        """Load plain top-level fields that were not set by argument or environment."""
        for name in type(self).model_fields:
            if name not in config_data or name in SECTIONS:
                continue
            if not self._is_overridden(name):
                setattr(self, name, config_data[name])

    def _load_section(self, config_data: dict, section: str) -> None:
        """Load one nested section key by key, honoring env overrides of single keys."""
        section_data = config_data.get(section)
        if not section_data:
            return
        if not isinstance(section_data, dict):
            raise ConfigurationError(f"Section '{section}' must be a mapping")
        if section in self._explicit_args:
            return

        target = getattr(self, section)
        for key, value in section_data.items():
            if key not in type(target).model_fields:
                logger.warning(f"Ignoring unknown setting '{section}.{key}'")
                continue
            if f"{section}{ENV_NESTED_DELIMITER}{key}" in self._env_vars_set:
                continue
            setattr(target, key, value)

    def _load_yaml_config(self, config_file: Path) -> None:
        """Load configuration from a YAML file.

        Unreadable or malformed files are logged and skipped; values that
        parse but fail validation raise ``ConfigurationError``.
        """
        try:
            with config_file.open(encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load YAML config from {config_file}: {e}")
            return

        if not config_data:
            return
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Top level of {config_file} must be a mapping")

        try:
            self._load_top_level(config_data)
            for section in SECTIONS:
                self._load_section(config_data, section)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid value in {config_file}: {e}") from e

        logger.debug(f"Loaded settings from {config_file}")


def load_settings(
    config_file: Optional[Union[str, Path]] = None, **overrides: Any
) -> WeatherboardSettings:
    """Build settings, reading ``config_file`` when given, else the default locations."""
    if config_file is not None:
        return WeatherboardSettings(_config_file=config_file, **overrides)
    return WeatherboardSettings(**overrides)
