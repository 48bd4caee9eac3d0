"""Display capabilities model for e-Paper panels."""

from typing import Any

from .utils.image_processing import frame_buffer_size


class DisplayCapabilities:
    """Geometry and color support of the target panel."""

    def __init__(
        self,
        width: int,
        height: int,
        colors: int,
        supports_partial_update: bool,
        supports_red: bool,
    ) -> None:
        """Initialize display capabilities.

        Args:
            width: Display width in pixels
            height: Display height in pixels
            colors: Number of inks the panel can show
            supports_partial_update: Whether partial updates are supported
            supports_red: Whether the panel has a chromatic (red) ink
        """
        self.width = width
        self.height = height
        self.colors = colors
        self.supports_partial_update = supports_partial_update
        self.supports_red = supports_red

    def __repr__(self) -> str:
        return (
            f"DisplayCapabilities(width={self.width}, height={self.height}, "
            f"colors={self.colors}, partial_update={self.supports_partial_update}, "
            f"red={self.supports_red})"
        )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def buffer_size(self) -> int:
        """Bytes in one full two-plane frame for this panel."""
        return frame_buffer_size(self.width, self.height)

    def to_dict(self) -> dict[str, Any]:
        """Convert capabilities to dictionary."""
        return {
            "width": self.width,
            "height": self.height,
            "colors": self.colors,
            "supports_partial_update": self.supports_partial_update,
            "supports_red": self.supports_red,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DisplayCapabilities":
        """Create DisplayCapabilities from dictionary.

        Raises:
            ValueError: If required fields are missing
        """
        required_fields = ["width", "height", "colors", "supports_partial_update", "supports_red"]
        for field in required_fields:
            if field not in data:
                raise ValueError(f"Missing required field: {field}")

        return cls(
            width=data["width"],
            height=data["height"],
            colors=data["colors"],
            supports_partial_update=data["supports_partial_update"],
            supports_red=data["supports_red"],
        )


# Waveshare 7.5" B V2: 800x480, white/black/red, full refresh only
WAVESHARE_7IN5B_V2 = DisplayCapabilities(
    width=800,
    height=480,
    colors=3,
    supports_partial_update=False,
    supports_red=True,
)
