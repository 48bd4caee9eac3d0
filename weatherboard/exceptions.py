"""Render pipeline exceptions."""

from typing import Optional


class RenderError(Exception):
    """Base exception for errors that abort a dashboard render."""


class MissingFieldError(RenderError):
    """Raised when a required weather value is absent."""

    def __init__(self, field: str, context: Optional[str] = None) -> None:
        """Initialize MissingFieldError.

        Args:
            field: Name of the absent field
            context: Where the field was expected (e.g. "current conditions")
        """
        location = f" in {context}" if context else ""
        super().__init__(f"Required field '{field}' is missing{location}")
        self.field = field
        self.context = context


class AssetLoadError(RenderError):
    """Raised when a bundled or configured asset (font, icon) fails to decode."""

    def __init__(self, asset: str, reason: str) -> None:
        super().__init__(f"Failed to load asset '{asset}': {reason}")
        self.asset = asset


class ImageFetchError(RenderError):
    """Raised when the teaser image cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"Failed to fetch image from {url}: {reason}")
        self.url = url
        self.status_code = status_code


class DegenerateInputError(RenderError):
    """Raised when a forecast series is too short for the graph math."""

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(f"Forecast has {length} samples, at least {minimum} required")
        self.length = length
        self.minimum = minimum


class ConfigurationError(Exception):
    """Raised when settings contain values the renderer cannot use."""
