"""Rendering pipeline for the tri-color dashboard."""

from .compositor import DashboardRenderer, axis_labels, format_number, round_half_away
from .dithering import DITHER_MODES, dither_image
from .graph import GraphScale, bresenham_line, render_graph
from .text import (
    FontFace,
    GlyphPlacement,
    TextLayout,
    WrappedText,
    draw_text,
    draw_wrapped,
    fit_to_box,
    fit_to_line_count,
    layout_glyphs,
    measure_text,
    wrap_text,
)

__all__ = [
    "DITHER_MODES",
    "DashboardRenderer",
    "FontFace",
    "GlyphPlacement",
    "GraphScale",
    "TextLayout",
    "WrappedText",
    "axis_labels",
    "bresenham_line",
    "dither_image",
    "draw_text",
    "draw_wrapped",
    "fit_to_box",
    "fit_to_line_count",
    "format_number",
    "layout_glyphs",
    "measure_text",
    "render_graph",
    "round_half_away",
    "wrap_text",
]
