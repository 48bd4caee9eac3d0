"""Tri-color e-Paper dashboard rendering.

Core Components:
- DashboardRenderer: composes header, graph and teaser into one canvas
- encode_frame / PackedFrameBuffer: the controller's two-plane bit format
- DisplayCapabilities: panel geometry
"""

from .capabilities import WAVESHARE_7IN5B_V2, DisplayCapabilities
from .region import Region
from .rendering.compositor import DashboardRenderer
from .utils.colors import EPaperColors, get_rendering_colors
from .utils.image_processing import PackedFrameBuffer, encode_frame

__all__ = [
    "WAVESHARE_7IN5B_V2",
    "DashboardRenderer",
    "DisplayCapabilities",
    "EPaperColors",
    "PackedFrameBuffer",
    "Region",
    "encode_frame",
    "get_rendering_colors",
]
