"""weatherboard - weather and article dashboard renderer for tri-color e-Paper displays."""

__version__ = "1.0.0"
__description__ = "Weather and article dashboard renderer for tri-color e-Paper displays"

__all__ = [
    "__description__",
    "__version__",
]
