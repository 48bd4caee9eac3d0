"""Weekly temperature and rain graph built from raw line primitives."""

import logging
import math
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import numpy as np
from PIL import Image

from ....exceptions import ConfigurationError
from ....models import WeatherSeries
from ..utils.colors import EPaperColors, RGBColor, get_rendering_colors
from .text import FontFace, draw_text

logger = logging.getLogger(__name__)

WEEKDAY_LABEL_SCALE = 24.0
WEEKDAY_LABEL_OFFSET = 5.0
DOT_INTERVAL = 4
SHADING_PERIOD = 6

DEFAULT_WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

Point = tuple[float, float]


@dataclass(frozen=True)
class GraphScale:
    """Integer axis bounds of the graph plus the true extremes they were derived from."""

    min_temp: int
    max_temp: int
    max_rain: int
    true_min_temp: float
    true_max_temp: float
    true_max_rain: float

    @classmethod
    def from_series(
        cls,
        series: WeatherSeries,
        temp_floor: int = 0,
        temp_ceiling: int = 20,
        rain_ceiling: int = 5,
    ) -> "GraphScale":
        """Pad the series' extremes so the line never touches the border.

        The axis always includes ``temp_floor`` and ``temp_ceiling`` and at
        least ``rain_ceiling`` mm of rain, so short or flat series don't
        produce a degenerate graph.
        """
        min_temp, max_temp = series.temperature_range()
        max_rain = series.max_precipitation()
        return cls(
            min_temp=min(math.floor(0.8 * min_temp), temp_floor),
            max_temp=max(math.ceil(1.2 * max_temp), temp_ceiling),
            max_rain=max(math.ceil(1.2 * max_rain), rain_ceiling),
            true_min_temp=min_temp,
            true_max_temp=max_temp,
            true_max_rain=max_rain,
        )


def bresenham_line(start: Point, end: Point) -> Iterator[tuple[int, int]]:
    """Yield the integer pixels of the segment from ``start`` to ``end``, inclusive.

    Float endpoints are truncated toward zero. Steep segments are walked along
    y; every segment is walked from its smaller major coordinate upward.
    """
    x0, y0 = start
    x1, y1 = end

    is_steep = abs(y1 - y0) > abs(x1 - x0)
    if is_steep:
        x0, y0 = y0, x0
        x1, y1 = y1, x1
    if x0 > x1:
        x0, x1 = x1, x0
        y0, y1 = y1, y0

    dx = x1 - x0
    dy = abs(y1 - y0)
    error = dx / 2.0
    y_step = 1 if y0 < y1 else -1

    x = int(x0)
    y = int(y0)
    end_x = int(x1)

    while x <= end_x:
        yield (y, x) if is_steep else (x, y)
        x += 1
        error -= dy
        if error < 0:
            y += y_step
            error += dx


def _put_pixel(pixels: Any, size: tuple[int, int], x: int, y: int, color: RGBColor) -> None:
    width, height = size
    if 0 <= x < width and 0 <= y < height:
        pixels[x, y] = color


def draw_line(image: Image.Image, start: Point, end: Point, color: RGBColor) -> None:
    """Draw a solid one-pixel segment, skipping pixels outside the image."""
    pixels = image.load()
    for x, y in bresenham_line(start, end):
        _put_pixel(pixels, image.size, x, y, color)


def draw_dotted_line(image: Image.Image, start: Point, end: Point, color: RGBColor) -> None:
    """Draw every ``DOT_INTERVAL``-th pixel of a segment."""
    pixels = image.load()
    for index, (x, y) in enumerate(bresenham_line(start, end)):
        if index % DOT_INTERVAL == 0:
            _put_pixel(pixels, image.size, x, y, color)


def temperature_to_y(temperature: float, scale: GraphScale, height: int) -> float:
    """Map a temperature to a pixel row: ``min_temp`` → ``height-1``, ``max_temp`` → 0."""
    span = scale.max_temp - scale.min_temp
    return height - ((temperature - scale.min_temp) / span) * (height - 1) - 1


def rain_to_y(precipitation: float, scale: GraphScale, height: int) -> float:
    """Map a precipitation amount to a pixel row, clamped into the image."""
    y = height - math.floor((precipitation / scale.max_rain) * (height - 1)) - 1
    return float(min(max(y, 0), height - 1))


def _in_zone_of(timestamp: datetime, now: datetime) -> datetime:
    """Express an aware timestamp in the timezone of an aware ``now``."""
    if timestamp.tzinfo is None or now.tzinfo is None:
        return timestamp
    return timestamp.astimezone(now.tzinfo)


def shading_mask(max_y: Sequence[Optional[int]], height: int) -> np.ndarray:
    """Diagonal stripe pattern limited to the pixels below each column's rain line.

    Args:
        max_y: Lowest-on-screen row touched by the rain line per column, or None
        height: Image height

    Returns:
        Boolean array of shape (height, len(max_y))
    """
    width = len(max_y)
    ys, xs = np.indices((height, width))
    ym = ys % SHADING_PERIOD
    yd = ys // SHADING_PERIOD
    xm = (xs + 2 * yd) % SHADING_PERIOD
    pattern = ((xm == ym) | (xm == ym + 1)) & (ym < 3)

    limits = np.array([height if y is None else y for y in max_y], dtype=np.int64)
    below_line = ys > limits[np.newaxis, :]
    return pattern & below_line


def render_graph(
    series: WeatherSeries,
    scale: GraphScale,
    width: int,
    height: int,
    face: FontFace,
    now: datetime,
    weekday_names: Sequence[str] = DEFAULT_WEEKDAY_NAMES,
    colors: Optional[Mapping[str, RGBColor]] = None,
) -> Image.Image:
    """Render the forecast graph as a standalone image.

    Layers, back to front: weekday separators with labels and the "now"
    marker, the rain line, the shading under the rain line, and the
    three-pixel temperature line.

    Args:
        series: Forecast samples, at least two
        scale: Axis bounds
        width: Image width in pixels
        height: Image height in pixels
        face: Font face for the weekday labels
        now: Current wall-clock time, in the forecast's timezone
        weekday_names: Labels for Monday through Sunday
        colors: Optional overrides for graph_temperature/graph_rain/graph_grid

    Returns:
        RGB image of the graph

    Raises:
        DegenerateInputError: If the series has fewer than two samples
        ConfigurationError: If an axis has no extent (equal temperature bounds
            or a rain ceiling of zero)
        MissingFieldError: If a sample lacks temperature or precipitation
    """
    series.require_graphable(2)
    if len(weekday_names) != 7:
        raise ValueError(f"Expected 7 weekday names, got {len(weekday_names)}")
    if scale.max_temp <= scale.min_temp:
        raise ConfigurationError(
            f"Temperature axis collapsed: min_temp={scale.min_temp}, max_temp={scale.max_temp}"
        )
    if scale.max_rain <= 0:
        raise ConfigurationError(f"Rain axis collapsed: max_rain={scale.max_rain}")

    palette = get_rendering_colors()
    if colors:
        palette.update(colors)

    image = Image.new("RGB", (width, height), EPaperColors.BACKGROUND)

    temperatures = series.temperatures()
    precipitations = series.precipitations()
    timestamps = [_in_zone_of(sample.timestamp, now) for sample in series]

    spacing = (width - 1) / (len(series) - 1)
    xs = [spacing * index for index in range(len(series))]
    temp_points = [(x, temperature_to_y(t, scale, height)) for x, t in zip(xs, temperatures)]
    rain_points = [(x, rain_to_y(p, scale, height)) for x, p in zip(xs, precipitations)]

    # Day separators, weekday labels and the current hour marker
    for index in range(len(series) - 1):
        first, second = timestamps[index], timestamps[index + 1]
        x = rain_points[index + 1][0]
        day_changes = first.date() != second.date()

        if first.date() == now.date() and first.hour <= now.hour < second.hour:
            draw_dotted_line(image, (x, 0.0), (x, float(height)), palette["graph_grid"])

        if day_changes:
            draw_line(image, (x, 0.0), (x, float(height)), palette["graph_grid"])

        if day_changes or index == 0:
            label = weekday_names[second.weekday()]
            draw_text(
                image,
                label,
                x + WEEKDAY_LABEL_OFFSET,
                0.0,
                face,
                WEEKDAY_LABEL_SCALE,
                palette["graph_grid"],
            )

    # Rain line, remembering the lowest pixel per column for the shading
    max_y: list[Optional[int]] = [None] * width
    pixels = image.load()
    for start, end in zip(rain_points, rain_points[1:]):
        for x, y in bresenham_line(start, end):
            x = min(max(x, 0), width - 1)
            lowest = max_y[x]
            if lowest is None or y > lowest:
                max_y[x] = y
            _put_pixel(pixels, image.size, x, y, palette["graph_rain"])

    mask = shading_mask(max_y, height)
    if mask.any():
        canvas = np.array(image)
        canvas[mask] = palette["graph_rain"]
        image = Image.fromarray(canvas)

    # Temperature line goes last so nothing covers it
    for start, end in zip(temp_points, temp_points[1:]):
        for offset in (1.0, 0.0, -1.0):
            draw_line(
                image,
                (start[0], start[1] + offset),
                (end[0], end[1] + offset),
                palette["graph_temperature"],
            )

    logger.debug(
        f"Rendered graph {width}x{height} for {len(series)} samples "
        f"(temp {scale.min_temp}..{scale.max_temp}, rain 0..{scale.max_rain})"
    )
    return image
