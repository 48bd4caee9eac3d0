"""Tests for two-tone dithering."""

import numpy as np
import pytest
from PIL import Image

from weatherboard.display.epaper.rendering.dithering import DITHER_MODES, dither_image, quantize
from weatherboard.exceptions import ConfigurationError


def gradient_image(width: int = 32, height: int = 8) -> Image.Image:
    row = np.linspace(0, 255, width).astype(np.uint8)
    return Image.fromarray(np.tile(row, (height, 1))).convert("RGB")


class TestQuantize:
    """Test suite for the single-pixel quantizer."""

    @pytest.mark.parametrize(("value", "expected"), [(0, 0), (127, 0), (128, 255), (255, 255)])
    def test_quantize_when_value_given_then_splits_at_128(self, value: int, expected: int) -> None:
        """Test values below 128 become black and the rest white."""
        # Act & Assert
        assert quantize(value) == expected


class TestDitherImage:
    """Test suite for dither_image."""

    @pytest.mark.parametrize("mode", DITHER_MODES)
    def test_dither_image_when_gradient_then_only_black_and_white(self, mode: str) -> None:
        """Test every mode produces pure black and white RGB."""
        # Act
        result = dither_image(gradient_image(), mode)

        # Assert
        assert result.mode == "RGB"
        assert result.size == (32, 8)
        values = np.unique(np.asarray(result))
        assert set(values.tolist()) <= {0, 255}

    @pytest.mark.parametrize("mode", DITHER_MODES)
    def test_dither_image_when_already_two_tone_then_unchanged(self, mode: str) -> None:
        """Test dithering a pure black/white image is a no-op."""
        # Arrange
        pattern = np.zeros((6, 6), dtype=np.uint8)
        pattern[::2, 1::2] = 255
        image = Image.fromarray(pattern).convert("RGB")

        # Act
        result = dither_image(image, mode)

        # Assert
        assert np.array_equal(np.asarray(result), np.asarray(image))

    def test_dither_image_when_floyd_steinberg_twice_then_idempotent(self) -> None:
        """Test dithering the dithered output changes nothing."""
        # Arrange
        once = dither_image(gradient_image(), "floyd_steinberg")

        # Act
        twice = dither_image(once, "floyd_steinberg")

        # Assert
        assert np.array_equal(np.asarray(once), np.asarray(twice))

    def test_dither_image_when_mid_gray_then_roughly_half_black(self) -> None:
        """Test error diffusion preserves average brightness."""
        # Arrange
        image = Image.new("RGB", (40, 40), (128, 128, 128))

        # Act
        result = dither_image(image, "floyd_steinberg")

        # Assert
        black_share = float((np.asarray(result.convert("L")) == 0).mean())
        assert 0.3 < black_share < 0.7

    def test_dither_image_when_unknown_mode_then_configuration_error(self) -> None:
        """Test an unsupported mode is rejected."""
        # Act & Assert
        with pytest.raises(ConfigurationError, match="Unknown dither mode"):
            dither_image(gradient_image(), "atkinson")
