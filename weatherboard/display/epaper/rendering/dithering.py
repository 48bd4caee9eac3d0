"""Two-tone dithering of photographic content for the e-Paper canvas."""

import logging

import numpy as np
from PIL import Image

from ....exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BLACK_LEVEL = 0
WHITE_LEVEL = 255
THRESHOLD = 128

DITHER_MODES = ("floyd_steinberg", "ordered", "threshold")

# Floyd-Steinberg neighbours as (dx, dy, weight / 16)
_DIFFUSION = ((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1))

BAYER_MATRIX_4X4 = np.array(
    [
        [0, 8, 2, 10],
        [12, 4, 14, 6],
        [3, 11, 1, 9],
        [15, 7, 13, 5],
    ],
    dtype=np.float64,
)


def quantize(value: int) -> int:
    """Black below ``THRESHOLD``, white otherwise."""
    return BLACK_LEVEL if value < THRESHOLD else WHITE_LEVEL


def _floyd_steinberg(levels: np.ndarray) -> np.ndarray:
    height, width = levels.shape
    pixels = levels.astype(np.int32).tolist()

    for y in range(height):
        row = pixels[y]
        for x in range(width):
            old = row[x]
            new = quantize(old)
            row[x] = new
            error = old - new
            if error == 0:
                continue
            for dx, dy, weight in _DIFFUSION:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and ny < height:
                    # int() truncates toward zero, matching integer error division
                    value = pixels[ny][nx] + int(error * weight / 16)
                    pixels[ny][nx] = min(max(value, BLACK_LEVEL), WHITE_LEVEL)

    return np.array(pixels, dtype=np.uint8).reshape(height, width)


def _ordered(levels: np.ndarray) -> np.ndarray:
    height, width = levels.shape
    threshold_map = (BAYER_MATRIX_4X4 + 1) / 17 * 255
    tiled = np.tile(threshold_map, (height // 4 + 1, width // 4 + 1))[:height, :width]
    return np.where(levels > tiled, WHITE_LEVEL, BLACK_LEVEL).astype(np.uint8)


def _threshold(levels: np.ndarray) -> np.ndarray:
    return np.where(levels < THRESHOLD, BLACK_LEVEL, WHITE_LEVEL).astype(np.uint8)


def dither_image(image: Image.Image, mode: str = "floyd_steinberg") -> Image.Image:
    """Reduce an image to pure black and white.

    The image is converted to 8-bit grayscale, quantized with the selected
    algorithm and expanded back to RGB with R = G = B so it can be pasted onto
    the canvas. An image that is already pure black/white comes back
    unchanged.

    Args:
        image: Any PIL image
        mode: "floyd_steinberg" (error diffusion), "ordered" (4x4 Bayer) or
            "threshold"

    Returns:
        RGB image containing only (0, 0, 0) and (255, 255, 255)

    Raises:
        ConfigurationError: If ``mode`` is unknown
    """
    if mode not in DITHER_MODES:
        raise ConfigurationError(f"Unknown dither mode: {mode!r}, expected one of {DITHER_MODES}")

    levels = np.asarray(image.convert("L"))
    if levels.size == 0:
        return Image.new("RGB", image.size, (WHITE_LEVEL,) * 3)

    if mode == "floyd_steinberg":
        result = _floyd_steinberg(levels)
    elif mode == "ordered":
        result = _ordered(levels)
    else:
        result = _threshold(levels)

    logger.debug(f"Dithered {image.width}x{image.height} image using {mode}")
    return Image.fromarray(result).convert("RGB")
