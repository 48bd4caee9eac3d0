"""Image conversions for the e-Paper canvas: frame packing and bundled icons."""

import io
import logging
from dataclasses import dataclass
from importlib import resources

import numpy as np
from PIL import Image, UnidentifiedImageError

from ....exceptions import AssetLoadError
from .colors import EPaperColors

logger = logging.getLogger(__name__)

ICON_PACKAGE = "weatherboard.display.epaper.assets"

# Bit values per plane for each device color. The controller reads the first
# plane as "1 = white, 0 = ink" and the second as "1 = chromatic".
WHITE_BITS = (1, 0)
BLACK_BITS = (0, 0)
CHROMATIC_BITS = (0, 1)


def bytes_per_row(width: int) -> int:
    """Bytes needed for one row of one plane: ``ceil(width / 8)``."""
    return (width + 7) // 8


def plane_size(width: int, height: int) -> int:
    """Size of one bit plane in bytes."""
    return bytes_per_row(width) * height


def frame_buffer_size(width: int, height: int) -> int:
    """Size of the whole two-plane buffer in bytes."""
    return 2 * plane_size(width, height)


def validate_buffer_size(buffer: bytes, expected_size: int) -> bool:
    """Validate buffer size.

    Args:
        buffer: Buffer to validate
        expected_size: Expected buffer size

    Returns:
        True if buffer size is valid, False otherwise
    """
    if len(buffer) != expected_size:
        logger.error(f"Invalid buffer size: {len(buffer)}, expected {expected_size}")
        return False
    return True


@dataclass(frozen=True)
class PackedFrameBuffer:
    """Two equal bit planes in the controller's row-major, MSB-first layout."""

    width: int
    height: int
    black_plane: bytes
    chromatic_plane: bytes

    def __post_init__(self) -> None:
        expected = plane_size(self.width, self.height)
        if len(self.black_plane) != expected or len(self.chromatic_plane) != expected:
            raise ValueError(
                f"Planes must be {expected} bytes for {self.width}x{self.height}, got "
                f"{len(self.black_plane)} and {len(self.chromatic_plane)}"
            )

    def to_bytes(self) -> bytes:
        """Black/white plane followed by the chromatic plane."""
        return self.black_plane + self.chromatic_plane

    def __len__(self) -> int:
        return len(self.black_plane) + len(self.chromatic_plane)

    @classmethod
    def from_bytes(cls, buffer: bytes, width: int, height: int) -> "PackedFrameBuffer":
        """Split a concatenated buffer back into its planes.

        Raises:
            ValueError: If the buffer size does not match the geometry
        """
        if not validate_buffer_size(buffer, frame_buffer_size(width, height)):
            raise ValueError(
                f"Buffer of {len(buffer)} bytes does not match a {width}x{height} frame"
            )
        half = plane_size(width, height)
        return cls(width, height, bytes(buffer[:half]), bytes(buffer[half:]))

    def to_image(self) -> Image.Image:
        """Decode the planes into an RGB image of the three device colors."""
        row_bytes = bytes_per_row(self.width)
        black = np.unpackbits(
            np.frombuffer(self.black_plane, dtype=np.uint8).reshape(self.height, row_bytes), axis=1
        )[:, : self.width]
        chromatic = np.unpackbits(
            np.frombuffer(self.chromatic_plane, dtype=np.uint8).reshape(self.height, row_bytes),
            axis=1,
        )[:, : self.width]

        pixels = np.empty((self.height, self.width, 3), dtype=np.uint8)
        pixels[:] = EPaperColors.BLACK
        pixels[black == WHITE_BITS[0]] = EPaperColors.WHITE
        pixels[chromatic == CHROMATIC_BITS[1]] = EPaperColors.CHROMATIC
        return Image.fromarray(pixels)


def encode_frame(canvas: Image.Image) -> PackedFrameBuffer:
    """Pack a three-color canvas into the controller's two bit planes.

    Pixels that are not exactly black or chromatic are encoded as white, so
    stray anti-aliased or off-palette pixels degrade to background instead of
    failing the render.

    Args:
        canvas: Image to encode, converted to RGB if needed

    Returns:
        PackedFrameBuffer with ``ceil(width / 8) * height`` bytes per plane
    """
    if canvas.mode != "RGB":
        canvas = canvas.convert("RGB")

    width, height = canvas.size
    pixels = np.asarray(canvas)

    is_black = np.all(pixels == EPaperColors.BLACK, axis=-1)
    is_chromatic = np.all(pixels == EPaperColors.CHROMATIC, axis=-1)
    is_white = ~(is_black | is_chromatic)

    black_bits = np.zeros((height, width), dtype=np.uint8)
    black_bits[is_white] = WHITE_BITS[0]
    chromatic_bits = np.zeros((height, width), dtype=np.uint8)
    chromatic_bits[is_chromatic] = CHROMATIC_BITS[1]

    # packbits pads every row to a byte boundary, most significant bit first
    black_plane = np.packbits(black_bits, axis=1).tobytes()
    chromatic_plane = np.packbits(chromatic_bits, axis=1).tobytes()

    logger.debug(
        f"Encoded {width}x{height} canvas: {int(is_black.sum())} black, "
        f"{int(is_chromatic.sum())} chromatic pixels"
    )
    return PackedFrameBuffer(width, height, black_plane, chromatic_plane)


def resize_exact(image: Image.Image, width: int, height: int) -> Image.Image:
    """Resize to exactly ``width`` x ``height`` with nearest-neighbour sampling."""
    return image.resize((width, height), Image.Resampling.NEAREST)


def load_icon(name: str) -> Image.Image:
    """Load a bundled bitmap icon as an RGB image.

    Args:
        name: Icon name without extension, e.g. "humidity"

    Raises:
        AssetLoadError: If the icon is missing or cannot be decoded
    """
    filename = f"{name}.pbm"
    try:
        data = resources.files(ICON_PACKAGE).joinpath(filename).read_bytes()
        icon = Image.open(io.BytesIO(data))
        icon.load()
    except (OSError, UnidentifiedImageError) as e:
        raise AssetLoadError(filename, str(e)) from e
    return icon.convert("RGB")
