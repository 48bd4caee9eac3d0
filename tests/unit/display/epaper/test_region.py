"""Tests for Region class."""

import pytest

from weatherboard.display.epaper.region import Region


class TestRegion:
    """Test suite for Region class."""

    def test_init_when_valid_parameters_then_creates_instance(self) -> None:
        """Test initialization with valid parameters."""
        # Arrange & Act
        region = Region(x=10, y=20, width=100, height=200)

        # Assert
        assert region.get_coordinates() == (10, 20, 100, 200)
        assert region.right == 110
        assert region.bottom == 220

    def test_init_when_negative_size_then_raises_value_error(self) -> None:
        """Test a negative width or height is rejected."""
        # Act & Assert
        with pytest.raises(ValueError, match="must not be negative"):
            Region(x=0, y=0, width=-1, height=10)

    def test_init_when_negative_position_then_creates_instance(self) -> None:
        """Test regions may start left of or above the canvas."""
        # Arrange & Act
        region = Region(x=-10, y=-20, width=100, height=200)

        # Assert
        assert (region.x, region.y) == (-10, -20)

    def test_repr_when_called_then_returns_string_representation(self) -> None:
        """Test string representation of Region."""
        # Act
        result = repr(Region(x=10, y=20, width=100, height=200))

        # Assert
        assert result == "Region(x=10, y=20, width=100, height=200)"

    def test_contains_point_when_point_inside_then_returns_true(self) -> None:
        """Test contains_point with points inside the region."""
        # Arrange
        region = Region(x=10, y=20, width=100, height=200)

        # Act & Assert
        assert region.contains_point(50, 50) is True
        assert region.contains_point(10, 20) is True  # Top-left corner
        assert region.contains_point(109, 219) is True  # Last pixel

    def test_contains_point_when_point_outside_then_returns_false(self) -> None:
        """Test contains_point with points outside the region."""
        # Arrange
        region = Region(x=10, y=20, width=100, height=200)

        # Act & Assert
        assert region.contains_point(5, 50) is False
        assert region.contains_point(50, 10) is False
        assert region.contains_point(110, 219) is False  # right is exclusive
        assert region.contains_point(109, 220) is False  # bottom is exclusive

    def test_overlaps_when_regions_intersect_then_returns_true(self) -> None:
        """Test overlapping regions."""
        # Arrange
        graph = Region(50, 100, 700, 200)
        label = Region(740, 110, 40, 30)

        # Act & Assert
        assert graph.overlaps(label) is True
        assert label.overlaps(graph) is True

    def test_overlaps_when_regions_only_touch_then_returns_false(self) -> None:
        """Test regions sharing an edge do not overlap."""
        # Arrange
        graph = Region(50, 100, 700, 200)
        teaser = Region(0, 300, 800, 180)

        # Act & Assert
        assert graph.overlaps(teaser) is False

    def test_eq_when_same_coordinates_then_equal_and_same_hash(self) -> None:
        """Test regions compare by value."""
        # Arrange
        first = Region(1, 2, 3, 4)
        second = Region(1, 2, 3, 4)

        # Act & Assert
        assert first == second
        assert hash(first) == hash(second)
        assert first != Region(1, 2, 3, 5)
        assert first != (1, 2, 3, 4)

    def test_to_box_when_called_then_returns_pillow_box(self) -> None:
        """Test conversion to a (left, top, right, bottom) box."""
        # Act & Assert
        assert Region(10, 20, 30, 40).to_box() == (10, 20, 40, 60)
