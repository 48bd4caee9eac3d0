"""Text measurement, greedy word wrapping and auto-fit scaling.

Glyphs are rasterized with FreeType through Pillow and then reduced to a flat
single-color stamp: every pixel whose coverage exceeds ``COVERAGE_THRESHOLD``
is painted, everything else is left untouched. The panel has no gray levels,
so anti-aliasing would only produce pixels the frame encoder throws away.
"""

import io
import logging
import math
from collections import OrderedDict
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont
from PIL.ImageFont import FreeTypeFont

from ....exceptions import AssetLoadError
from ..utils.colors import RGBColor

logger = logging.getLogger(__name__)

MAX_FONT_CACHE_SIZE = 16
COVERAGE_THRESHOLD = 0.1
SCALE_STEP = 1.0
BOX_FIT_FLOOR = 13.0
LINE_FIT_FLOOR = 15.0


class FontFace:
    """A scalable font, decoded once and instantiated per scale on demand.

    Instances keep a small LRU cache of ``FreeTypeFont`` objects because the
    auto-fit search asks for the same handful of sizes over and over.
    """

    def __init__(self, font_bytes: Optional[bytes] = None, name: str = "builtin") -> None:
        """Initialize the font face.

        Args:
            font_bytes: Raw TrueType/OpenType data, or None for Pillow's
                embedded scalable default font
            name: Name used in log messages and errors

        Raises:
            AssetLoadError: If the font data cannot be decoded
        """
        self.name = name
        self._font_bytes = font_bytes
        self._font_cache: OrderedDict[float, FreeTypeFont] = OrderedDict()

        # Decode once up front so a broken font aborts before anything is drawn
        self.get_font(12.0)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "FontFace":
        """Load a font face from a file.

        Raises:
            AssetLoadError: If the file cannot be read or decoded
        """
        font_path = Path(path)
        try:
            data = font_path.read_bytes()
        except OSError as e:
            raise AssetLoadError(str(font_path), str(e)) from e
        return cls(data, name=font_path.name)

    @classmethod
    def builtin(cls) -> "FontFace":
        """Font face backed by the scalable font embedded in Pillow."""
        return cls(None, name="builtin")

    def get_font(self, scale: float) -> FreeTypeFont:
        """Get the font instantiated at ``scale`` pixels per em.

        Args:
            scale: Font size in pixels

        Returns:
            FreeTypeFont for that size

        Raises:
            AssetLoadError: If FreeType cannot instantiate the font
        """
        scale = float(scale)
        if scale in self._font_cache:
            font = self._font_cache.pop(scale)
            self._font_cache[scale] = font
            return font

        try:
            if self._font_bytes is None:
                loaded = ImageFont.load_default(size=scale)
            else:
                loaded = ImageFont.truetype(io.BytesIO(self._font_bytes), scale)
        except (OSError, ValueError) as e:
            raise AssetLoadError(self.name, str(e)) from e

        if not isinstance(loaded, FreeTypeFont):
            raise AssetLoadError(self.name, "Pillow was built without FreeType support")

        if len(self._font_cache) >= MAX_FONT_CACHE_SIZE:
            self._font_cache.popitem(last=False)
        self._font_cache[scale] = loaded
        return loaded

    def line_height(self, scale: float) -> float:
        """Height of one line of text: ``ceil(ascent + descent)``."""
        ascent, descent = self.get_font(scale).getmetrics()
        return float(math.ceil(ascent + descent))

    def space_width(self, scale: float) -> float:
        """Advance width of a single space."""
        return float(self.get_font(scale).getlength(" "))

    def word_width(self, scale: float, word: str) -> float:
        """Distance from the pen origin to the right edge of the word's ink."""
        return float(max(self.get_font(scale).getbbox(word)[2], 0))

    def __repr__(self) -> str:
        return f"FontFace(name={self.name!r}, cached_sizes={len(self._font_cache)})"


@dataclass(frozen=True)
class GlyphPlacement:
    """One rasterized glyph pixel relative to the text origin."""

    x: int
    y: int
    coverage: float


@dataclass(frozen=True, eq=False)
class TextLayout:
    """Rasterized coverage of a single line of text.

    ``coverage`` holds values in [0, 1]; its top-left pixel sits at
    (``offset_x``, ``offset_y``) relative to the origin, which is the left
    edge of the pen position at the font's ascender line.
    """

    text: str
    scale: float
    coverage: np.ndarray
    offset_x: int = 0
    offset_y: int = 0

    @property
    def is_empty(self) -> bool:
        return self.coverage.size == 0 or not bool((self.coverage > 0).any())

    @property
    def ink_width(self) -> int:
        """Horizontal extent from the leftmost to the rightmost inked pixel."""
        if self.is_empty:
            return 0
        columns = np.flatnonzero((self.coverage > 0).any(axis=0))
        return int(columns[-1] - columns[0] + 1)

    def placements(self) -> Iterator[GlyphPlacement]:
        """Yield every pixel with non-zero coverage, in row-major order."""
        rows, cols = np.nonzero(self.coverage > 0)
        for row, col in zip(rows.tolist(), cols.tolist()):
            yield GlyphPlacement(
                x=col + self.offset_x,
                y=row + self.offset_y,
                coverage=float(self.coverage[row, col]),
            )

    def stamp(self, threshold: float = COVERAGE_THRESHOLD) -> Optional[Image.Image]:
        """Binary "L" mask of the pixels above ``threshold``, or None if nothing is inked."""
        if self.is_empty:
            return None
        binary = np.where(self.coverage > threshold, 255, 0).astype(np.uint8)
        return Image.fromarray(binary)


def layout_glyphs(face: FontFace, text: str, scale: float) -> TextLayout:
    """Rasterize ``text`` as a single line.

    Newlines are not interpreted; callers wrap text with ``wrap_text``.
    """
    font = face.get_font(scale)
    if not text:
        return TextLayout(text, scale, np.zeros((0, 0), dtype=np.float32))

    left, top, right, bottom = font.getbbox(text)
    width, height = int(right - left), int(bottom - top)
    if width <= 0 or height <= 0:
        return TextLayout(text, scale, np.zeros((0, 0), dtype=np.float32))

    mask = Image.new("L", (width, height), 0)
    ImageDraw.Draw(mask).text((-left, -top), text, font=font, fill=255)
    coverage = np.asarray(mask, dtype=np.float32) / 255.0
    return TextLayout(text, scale, coverage, offset_x=int(left), offset_y=int(top))


def measure_text(face: FontFace, text: str, scale: float) -> tuple[float, float]:
    """Get the width and height of ``text`` rendered as one line.

    Width is the ink extent of the string; height is the font's line height
    at ``scale``. Text without any visible pixel measures (0, 0).
    """
    layout = layout_glyphs(face, text, scale)
    if layout.is_empty:
        return 0.0, 0.0
    return float(layout.ink_width), face.line_height(scale)


def draw_text(
    canvas: Image.Image,
    text: str,
    x: float,
    y: float,
    face: FontFace,
    scale: float,
    color: RGBColor,
) -> None:
    """Draw ``text`` with its origin at (x, y) in one flat color, clipped to the canvas."""
    layout = layout_glyphs(face, text, scale)
    stamp = layout.stamp()
    if stamp is None:
        return
    canvas.paste(color, (int(x) + layout.offset_x, int(y) + layout.offset_y), stamp)


def draw_text_right(
    canvas: Image.Image, text: str, x: float, y: float, face: FontFace, scale: float, color: RGBColor
) -> None:
    """Draw text so that it ends at ``x``."""
    text_width, _ = measure_text(face, text, scale)
    draw_text(canvas, text, x - text_width, y, face, scale, color)


def draw_text_bottom(
    canvas: Image.Image, text: str, x: float, y: float, face: FontFace, scale: float, color: RGBColor
) -> None:
    """Draw text so that its line box ends at ``y``."""
    _, text_height = measure_text(face, text, scale)
    draw_text(canvas, text, x, y - text_height, face, scale, color)


def draw_text_bottom_right(
    canvas: Image.Image, text: str, x: float, y: float, face: FontFace, scale: float, color: RGBColor
) -> None:
    """Draw text so that its line box ends at (x, y)."""
    text_width, text_height = measure_text(face, text, scale)
    draw_text(canvas, text, x - text_width, y - text_height, face, scale, color)


@dataclass(frozen=True)
class WrappedLine:
    """Words of one wrapped line with their x offsets from the line start."""

    words: tuple[tuple[str, float], ...]
    width: float


@dataclass(frozen=True)
class WrappedText:
    """Result of greedy word wrapping at one scale."""

    scale: float
    line_height: float
    line_spacing: float
    lines: tuple[WrappedLine, ...] = field(default_factory=tuple)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def width(self) -> float:
        return max((line.width for line in self.lines), default=0.0)

    @property
    def height(self) -> float:
        if not self.lines:
            return 0.0
        count = len(self.lines)
        return count * self.line_height + (count - 1) * self.line_spacing

    def line_offset(self, index: int) -> float:
        """Vertical offset of line ``index`` from the top of the block."""
        return index * (self.line_height + self.line_spacing)


def wrap_text(
    face: FontFace, text: str, scale: float, max_width: float, line_spacing: float = 0.0
) -> WrappedText:
    """Greedily wrap ``text`` into lines no wider than ``max_width``.

    Words are split on whitespace and never broken; a word wider than
    ``max_width`` gets a line of its own and overflows it. A word only starts a
    new line when the current line already holds something.

    Args:
        face: Font face to measure with
        text: Text to wrap
        scale: Font size in pixels
        max_width: Maximum line width in pixels
        line_spacing: Extra pixels between consecutive lines

    Returns:
        WrappedText describing lines, word offsets and the block size
    """
    space_width = face.space_width(scale)
    lines: list[WrappedLine] = []
    current: list[tuple[str, float]] = []
    cursor_x = 0.0
    line_width = 0.0

    for word in text.split():
        word_width = face.word_width(scale, word)

        if current and cursor_x + word_width > max_width:
            lines.append(WrappedLine(tuple(current), line_width))
            current = []
            cursor_x = 0.0

        current.append((word, cursor_x))
        line_width = cursor_x + word_width
        cursor_x += word_width + space_width

    if current:
        lines.append(WrappedLine(tuple(current), line_width))

    return WrappedText(
        scale=float(scale),
        line_height=face.line_height(scale),
        line_spacing=float(line_spacing),
        lines=tuple(lines),
    )


def draw_wrapped(
    canvas: Image.Image,
    wrapped: WrappedText,
    x: float,
    y: float,
    face: FontFace,
    color: RGBColor,
) -> tuple[float, float]:
    """Draw previously wrapped text with its top-left corner at (x, y).

    Returns:
        (width, height) of the drawn block
    """
    for index, line in enumerate(wrapped.lines):
        line_y = y + wrapped.line_offset(index)
        for word, word_x in line.words:
            draw_text(canvas, word, x + word_x, line_y, face, wrapped.scale, color)
    return wrapped.width, wrapped.height


def draw_text_wrapped(
    canvas: Image.Image,
    text: str,
    x: float,
    y: float,
    max_width: float,
    line_spacing: float,
    face: FontFace,
    scale: float,
    color: RGBColor,
) -> tuple[float, float]:
    """Wrap and draw ``text`` in one call. Returns the drawn (width, height)."""
    wrapped = wrap_text(face, text, scale, max_width, line_spacing)
    return draw_wrapped(canvas, wrapped, x, y, face, color)


def _search_scale(fits: Callable[[float], bool], start_scale: float, floor: float) -> float:
    """Step the scale down by ``SCALE_STEP`` until ``fits`` accepts it.

    Returns ``floor`` when the next step would go below it. A start scale that
    is already below the floor is tried once and returned unchanged.
    """
    scale = float(start_scale)
    while not fits(scale):
        next_scale = scale - SCALE_STEP
        if next_scale < floor:
            result = floor if scale > floor else scale
            logger.warning(
                f"Text scale reached floor: returning {result} (started at {start_scale})"
            )
            return result
        scale = next_scale
    return scale


def fit_to_box(
    face: FontFace,
    text: str,
    box_width: float,
    box_height: float,
    line_spacing: float,
    start_scale: float,
    floor: float = BOX_FIT_FLOOR,
) -> float:
    """Largest scale (stepping down from ``start_scale``) whose wrapped text fits the box."""

    def fits(scale: float) -> bool:
        wrapped = wrap_text(face, text, scale, box_width, line_spacing)
        return wrapped.width <= box_width and wrapped.height <= box_height

    return _search_scale(fits, start_scale, floor)


def fit_to_line_count(
    face: FontFace,
    text: str,
    line_width: float,
    target_lines: int,
    start_scale: float,
    floor: float = LINE_FIT_FLOOR,
) -> float:
    """Largest scale (stepping down from ``start_scale``) that wraps into ``target_lines`` or fewer."""

    def fits(scale: float) -> bool:
        wrapped = wrap_text(face, text, scale, line_width)
        return wrapped.line_count <= target_lines

    return _search_scale(fits, start_scale, floor)
