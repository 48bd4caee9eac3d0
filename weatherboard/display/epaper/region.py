"""Rectangular areas of the dashboard canvas."""


class Region:
    """A rectangle on the canvas, in pixels."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        """Initialize a region.

        Args:
            x: X-coordinate of top-left corner
            y: Y-coordinate of top-left corner
            width: Width of region in pixels
            height: Height of region in pixels

        Raises:
            ValueError: If width or height is negative
        """
        if width < 0 or height < 0:
            raise ValueError(f"Region size must not be negative, got {width}x{height}")
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    def __repr__(self) -> str:
        return f"Region(x={self.x}, y={self.y}, width={self.width}, height={self.height})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Region):
            return NotImplemented
        return self.get_coordinates() == other.get_coordinates()

    def __hash__(self) -> int:
        return hash(self.get_coordinates())

    @property
    def right(self) -> int:
        """First column to the right of the region."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """First row below the region."""
        return self.y + self.height

    def contains_point(self, x: int, y: int) -> bool:
        """Check if region contains a point.

        Args:
            x: X-coordinate
            y: Y-coordinate

        Returns:
            True if point is in region, False otherwise
        """
        return self.x <= x < self.right and self.y <= y < self.bottom

    def overlaps(self, other: "Region") -> bool:
        """Check if region overlaps with another region."""
        return not (
            self.right <= other.x
            or other.right <= self.x
            or self.bottom <= other.y
            or other.bottom <= self.y
        )

    def get_coordinates(self) -> tuple[int, int, int, int]:
        """Get coordinates of the region.

        Returns:
            Tuple of (x, y, width, height)
        """
        return (self.x, self.y, self.width, self.height)

    def to_box(self) -> tuple[int, int, int, int]:
        """Pillow box tuple ``(left, top, right, bottom)``."""
        return (self.x, self.y, self.right, self.bottom)
