"""
Color constants for the tri-color e-Paper display.

The controller knows exactly three inks. Everything drawn on the canvas must
use one of these RGB values; the frame encoder maps any other value to white.
"""

from typing import Dict, Tuple

RGBColor = Tuple[int, int, int]


class EPaperColors:
    """Device colors as RGB tuples used on the software canvas."""

    WHITE: RGBColor = (255, 255, 255)
    BLACK: RGBColor = (0, 0, 0)
    # Rendered as red in software; physically the panel's spot-color ink.
    CHROMATIC: RGBColor = (255, 0, 0)

    # Semantic assignments
    BACKGROUND = WHITE
    TEXT_PRIMARY = BLACK
    TEXT_ALERT = CHROMATIC
    GRAPH_TEMPERATURE = CHROMATIC
    GRAPH_RAIN = BLACK
    GRAPH_GRID = BLACK


def get_rendering_colors() -> Dict[str, RGBColor]:
    """
    Get colors for common rendering scenarios.

    Returns:
        Dictionary of semantic color names to RGB tuples
    """
    return {
        "background": EPaperColors.BACKGROUND,
        "text_primary": EPaperColors.TEXT_PRIMARY,
        "text_alert": EPaperColors.TEXT_ALERT,
        "graph_temperature": EPaperColors.GRAPH_TEMPERATURE,
        "graph_rain": EPaperColors.GRAPH_RAIN,
        "graph_grid": EPaperColors.GRAPH_GRID,
    }


def is_device_color(color: Tuple[int, ...]) -> bool:
    """
    Check whether an RGB value is one of the three device colors.

    Args:
        color: RGB tuple to check

    Returns:
        True if the panel can show the color exactly
    """
    return tuple(color[:3]) in (EPaperColors.WHITE, EPaperColors.BLACK, EPaperColors.CHROMATIC)


# Convenience constants for direct use
WHITE = EPaperColors.WHITE
BLACK = EPaperColors.BLACK
CHROMATIC = EPaperColors.CHROMATIC
