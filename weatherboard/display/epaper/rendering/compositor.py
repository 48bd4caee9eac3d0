"""Dashboard compositor: header, forecast graph and article teaser on one canvas."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from PIL import Image

from ....config.settings import GraphSettings, WeatherboardSettings
from ....models import CurrentConditions, DisplayData, TeaserArticle, WeatherSeries
from ....sources.image_fetcher import HttpImageFetcher
from ....sources.protocols import ImageFetcher
from ..capabilities import WAVESHARE_7IN5B_V2, DisplayCapabilities
from ..region import Region
from ..utils.colors import EPaperColors
from ..utils.image_processing import PackedFrameBuffer, encode_frame, load_icon, resize_exact
from ..utils.performance import PerformanceMetrics
from .dithering import dither_image
from .graph import GraphScale, render_graph
from .text import (
    BOX_FIT_FLOOR,
    FontFace,
    draw_text,
    draw_text_bottom,
    draw_text_bottom_right,
    draw_text_right,
    draw_text_wrapped,
    fit_to_box,
    fit_to_line_count,
    measure_text,
)

logger = logging.getLogger(__name__)

# Header layout
TEMPERATURE_X = 10.0
TEMPERATURE_Y = 0.0
TEMPERATURE_SCALE = 100.0
CONDITION_SCALE = 36.0
CONDITION_GAP = 20.0
DETAIL_SCALE = 32.0
DETAIL_TEXT_Y = 10.0
HUMIDITY_ICON_Y = 7
HUMIDITY_ICON_SHIFT = 5.0
HUMIDITY_TEXT_GAP = 2.0
WIND_ICON_Y = 8
WIND_GAP = 15.0
WIND_TEXT_GAP = 5.0
CLOCK_RIGHT_MARGIN = 10.0
CLOCK_Y = 10.0
CLOCK_SCALE = 36.0

# Graph axis labels
AXIS_LABEL_MARGIN = 10
AXIS_LABEL_TOP_OFFSET = 18.0

# Teaser layout
SUBJECT_SCALE_DROP = 8.0
SUBJECT_MIN_SCALE = 13.0
SUMMARY_SCALE_DROP = 4.0
TITLE_GAP = 5.0
SUBJECT_EXTRA_HEIGHT = 3.0
SUMMARY_GAP = 8.0


def format_number(value: float) -> str:
    """Shortest decimal form of ``value``: 21.0 -> "21", 21.5 -> "21.5"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def round_to_hour(moment: datetime) -> datetime:
    """Snap to the nearest full hour; minute 30 still rounds down."""
    rounded = moment.replace(minute=0, second=0, microsecond=0)
    if moment.minute > 30:
        rounded += timedelta(hours=1)
        # pytz zones need a normalize after arithmetic to land on the right offset
        normalize = getattr(rounded.tzinfo, "normalize", None)
        if normalize is not None:
            rounded = normalize(rounded)
    return rounded


@dataclass(frozen=True)
class AxisLabels:
    """Texts at the ends of the graph's temperature and rain axes."""

    temp_min: str
    temp_max: str
    rain_min: str
    rain_max: str


def axis_labels(scale: GraphScale, graph_settings: GraphSettings) -> AxisLabels:
    """Label the axes with the padded bounds, or the data extremes where the axis was widened.

    An axis end is "widened" when the data pushed it past its fixed floor or
    ceiling. With ``label_true_extremes`` enabled such an end shows the rounded
    data value; otherwise every end shows its bound.
    """
    show_true = graph_settings.label_true_extremes

    if show_true and scale.min_temp < graph_settings.temp_floor:
        temp_min = str(round_half_away(scale.true_min_temp))
    else:
        temp_min = str(scale.min_temp)

    if show_true and scale.max_temp > graph_settings.temp_ceiling:
        temp_max = str(round_half_away(scale.true_max_temp))
    else:
        temp_max = str(scale.max_temp)

    if show_true and scale.max_rain > graph_settings.rain_ceiling:
        rain_max = str(round_half_away(scale.true_max_rain))
    else:
        rain_max = str(scale.max_rain)

    return AxisLabels(temp_min=temp_min, temp_max=temp_max, rain_min="0", rain_max=rain_max)


class DashboardRenderer:
    """Renders weather and teaser data into a tri-color canvas and frame buffer.

    One renderer can be reused for many cycles; every call to ``render``
    starts from a blank canvas and keeps no state besides the font cache.
    """

    def __init__(
        self,
        settings: WeatherboardSettings,
        font_face: Optional[FontFace] = None,
        fetcher: Optional[ImageFetcher] = None,
        capabilities: DisplayCapabilities = WAVESHARE_7IN5B_V2,
    ) -> None:
        """Initialize the renderer.

        Args:
            settings: Renderer settings
            font_face: Font to draw with; loaded from ``settings.font_path``
                or Pillow's built-in font when omitted
            fetcher: Teaser image fetcher; an ``HttpImageFetcher`` when omitted
            capabilities: Target panel geometry

        Raises:
            AssetLoadError: If the font or a bundled icon cannot be decoded
        """
        self.settings = settings
        self.capabilities = capabilities

        if font_face is None:
            font_face = (
                FontFace.from_path(settings.font_path) if settings.font_path else FontFace.builtin()
            )
        self.face = font_face
        self._owned_fetcher: Optional[HttpImageFetcher] = None
        if fetcher is None:
            fetcher = self._owned_fetcher = HttpImageFetcher(timeout=settings.request_timeout)
        self.fetcher: ImageFetcher = fetcher

        self._humidity_icon = load_icon("humidity")
        self._wind_icon = load_icon("wind")

        graph = settings.graph
        self.graph_region = Region(graph.x, graph.y, graph.width, graph.height)

        logger.info(
            f"DashboardRenderer initialized: {capabilities.width}x{capabilities.height}, "
            f"font={self.face.name}"
        )

    def __enter__(self) -> "DashboardRenderer":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the image fetcher if this renderer created it."""
        if self._owned_fetcher is not None:
            self._owned_fetcher.close()

    @property
    def teaser_region(self) -> Region:
        """Area below the graph reserved for the teaser, padding included."""
        top = self.graph_region.bottom
        return Region(0, top, self.capabilities.width, max(self.capabilities.height - top, 0))

    def _resolve_now(self, now: Optional[datetime]) -> datetime:
        tz = self.settings.tzinfo
        if now is None:
            return datetime.now(tz)
        if now.tzinfo is None:
            return tz.localize(now)
        return now.astimezone(tz)

    def render(self, display_data: DisplayData, now: Optional[datetime] = None) -> Image.Image:
        """Render the full dashboard.

        Args:
            display_data: Weather, forecast and optional teaser article
            now: Current time; naive values are taken as local to the
                configured timezone. Defaults to the current time.

        Returns:
            RGB canvas containing only the three device colors

        Raises:
            MissingFieldError: If a required temperature or precipitation is absent
            DegenerateInputError: If the forecast is shorter than ``min_forecast_points``
            ImageFetchError: If the teaser image cannot be fetched or decoded
            ConfigurationError: If the configured axis bounds leave a graph axis
                without extent
        """
        performance = PerformanceMetrics()
        now = self._resolve_now(now)
        series = display_data.series

        try:
            with performance.measure("render"):
                series.require_graphable(self.settings.min_forecast_points)

                canvas = Image.new("RGB", self.capabilities.size, EPaperColors.BACKGROUND)

                with performance.measure("header"):
                    self._render_header(canvas, display_data.current, now)

                with performance.measure("graph"):
                    self._render_graph(canvas, series, now)

                if display_data.article is not None and self.settings.teaser.enabled:
                    with performance.measure("teaser"):
                        self._render_teaser(canvas, display_data.article)
        except Exception:
            logger.exception("Dashboard render failed")
            raise

        performance.log_summary(logger)
        logger.info(f"Render completed in {performance.get_operation_time('render'):.2f}ms")

        if self.settings.png_output_path:
            self._save_preview(canvas, Path(self.settings.png_output_path))

        return canvas

    def render_frame(
        self, display_data: DisplayData, now: Optional[datetime] = None
    ) -> PackedFrameBuffer:
        """Render the dashboard and pack it for the display controller."""
        canvas = self.render(display_data, now)
        frame = encode_frame(canvas)
        logger.debug(f"Frame buffer ready: {len(frame)} bytes")
        return frame

    def _save_preview(self, canvas: Image.Image, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        canvas.save(path, "PNG")
        logger.info(f"Saved PNG preview to {path}")

    def _render_header(self, canvas: Image.Image, current: CurrentConditions, now: datetime) -> None:
        """Temperature, condition, humidity, wind and clock along the top edge."""
        face = self.face
        temperature = current.require_temperature()

        temp_text = f"{format_number(temperature)}°"
        temp_color = (
            EPaperColors.TEXT_ALERT
            if temperature >= self.settings.alert_temperature
            else EPaperColors.TEXT_PRIMARY
        )
        temp_width, temp_height = measure_text(face, temp_text, TEMPERATURE_SCALE)
        draw_text(canvas, temp_text, TEMPERATURE_X, TEMPERATURE_Y, face, TEMPERATURE_SCALE, temp_color)

        desc_x = TEMPERATURE_X + temp_width + CONDITION_GAP
        desc_y = TEMPERATURE_Y + temp_height / 2.0
        condition_text = self.settings.labels.condition_label(current.condition)
        draw_text(
            canvas, condition_text, desc_x, desc_y, face, CONDITION_SCALE, EPaperColors.TEXT_PRIMARY
        )

        # Humidity and wind share one row; a missing value frees its slot
        slot_x = desc_x - HUMIDITY_ICON_SHIFT
        if current.relative_humidity is not None:
            icon = self._humidity_icon
            canvas.paste(icon, (int(slot_x), HUMIDITY_ICON_Y))
            text = f"{format_number(current.relative_humidity)}%"
            text_x = slot_x + icon.width + HUMIDITY_TEXT_GAP
            draw_text(canvas, text, text_x, DETAIL_TEXT_Y, face, DETAIL_SCALE, EPaperColors.TEXT_PRIMARY)
            text_width, _ = measure_text(face, text, DETAIL_SCALE)
            slot_x = text_x + text_width + WIND_GAP

        if current.wind_speed is not None:
            icon = self._wind_icon
            canvas.paste(icon, (int(slot_x), WIND_ICON_Y))
            text = f"{round_half_away(current.wind_speed)}km/h"
            text_x = slot_x + icon.width + WIND_TEXT_GAP
            draw_text(canvas, text, text_x, DETAIL_TEXT_Y, face, DETAIL_SCALE, EPaperColors.TEXT_PRIMARY)

        clock_text = round_to_hour(now).strftime(self.settings.time_format)
        draw_text_right(
            canvas,
            clock_text,
            self.capabilities.width - CLOCK_RIGHT_MARGIN,
            CLOCK_Y,
            face,
            CLOCK_SCALE,
            EPaperColors.TEXT_PRIMARY,
        )

    def _render_graph(self, canvas: Image.Image, series: WeatherSeries, now: datetime) -> None:
        """Forecast graph plus the axis labels on both sides."""
        graph_settings = self.settings.graph
        region = self.graph_region
        face = self.face

        scale = GraphScale.from_series(
            series,
            temp_floor=graph_settings.temp_floor,
            temp_ceiling=graph_settings.temp_ceiling,
            rain_ceiling=graph_settings.rain_ceiling,
        )
        graph = render_graph(
            series,
            scale,
            region.width,
            region.height,
            face,
            now,
            weekday_names=self.settings.labels.weekday_names,
        )

        labels = axis_labels(scale, graph_settings)
        label_scale = graph_settings.label_scale
        temp_x = float(region.x - AXIS_LABEL_MARGIN)
        rain_x = float(region.right + AXIS_LABEL_MARGIN)
        top_y = region.y + AXIS_LABEL_TOP_OFFSET
        bottom_y = float(region.bottom)

        draw_text_right(
            canvas, labels.temp_max, temp_x, top_y, face, label_scale, EPaperColors.GRAPH_TEMPERATURE
        )
        draw_text_bottom_right(
            canvas, labels.temp_min, temp_x, bottom_y, face, label_scale, EPaperColors.GRAPH_TEMPERATURE
        )
        draw_text(canvas, labels.rain_max, rain_x, top_y, face, label_scale, EPaperColors.GRAPH_RAIN)
        draw_text_bottom(
            canvas, labels.rain_min, rain_x, bottom_y, face, label_scale, EPaperColors.GRAPH_RAIN
        )

        canvas.paste(graph, (region.x, region.y))
        logger.debug(f"Graph axis labels: {labels}")

    def _render_teaser(self, canvas: Image.Image, article: TeaserArticle) -> None:
        """Dithered photo on the left, title, subject and summary on the right."""
        teaser = self.settings.teaser
        padding = teaser.padding
        face = self.face
        black = EPaperColors.TEXT_PRIMARY

        top = self.teaser_region.y + padding
        image_height = self.capabilities.height - top - padding
        if image_height <= 0:
            logger.warning("No room left below the graph, skipping teaser")
            return
        image_width = int(image_height * teaser.image_aspect_ratio)

        photo = self.fetcher.fetch(article.image_url)
        photo = resize_exact(photo, image_width, image_height)
        photo = dither_image(photo, self.settings.dither_mode)
        canvas.paste(photo, (padding, top))

        text_x = float(padding + image_width + padding)
        max_width = self.capabilities.width - text_x - padding

        title_scale = fit_to_line_count(
            face, article.title, max_width, teaser.title_max_lines, teaser.title_start_scale
        )
        _, title_height = draw_text_wrapped(
            canvas,
            article.title,
            text_x,
            float(top),
            max_width,
            teaser.title_line_spacing,
            face,
            title_scale,
            black,
        )

        subject_y = top + title_height + TITLE_GAP
        subject_height = 0.0
        if article.subject:
            subject_scale = max(title_scale - SUBJECT_SCALE_DROP, SUBJECT_MIN_SCALE)
            _, height = draw_text_wrapped(
                canvas,
                article.subject,
                text_x,
                subject_y,
                max_width,
                teaser.subject_line_spacing,
                face,
                subject_scale,
                black,
            )
            subject_height = height + SUBJECT_EXTRA_HEIGHT

        summary_y = subject_y + subject_height + SUMMARY_GAP
        summary_max_height = top + image_height - summary_y
        summary_start = max(title_scale - SUMMARY_SCALE_DROP, BOX_FIT_FLOOR)
        summary_scale = fit_to_box(
            face,
            article.summary,
            max_width,
            summary_max_height,
            teaser.summary_line_spacing,
            summary_start,
        )
        draw_text_wrapped(
            canvas,
            article.summary,
            text_x,
            summary_y,
            max_width,
            teaser.summary_line_spacing,
            face,
            summary_scale,
            black,
        )
        logger.debug(
            f"Teaser scales: title={title_scale}, summary={summary_scale}, "
            f"image={image_width}x{image_height}"
        )
