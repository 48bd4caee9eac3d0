"""E-Paper display utilities including colors and frame packing."""

from .colors import EPaperColors, get_rendering_colors, is_device_color
from .image_processing import PackedFrameBuffer, encode_frame, load_icon, resize_exact
from .performance import PerformanceMetrics

__all__ = [
    "EPaperColors",
    "PackedFrameBuffer",
    "PerformanceMetrics",
    "encode_frame",
    "get_rendering_colors",
    "is_device_color",
    "load_icon",
    "resize_exact",
]
