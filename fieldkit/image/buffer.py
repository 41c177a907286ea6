"""Conversion between Pillow images and raw 32-bit ARGB pixel buffers.

Buffers are row-major with the top row first. Each pixel is four bytes in
A, R, G, B order, and each row may carry trailing padding up to
``bytes_per_row`` so that rows start on an aligned offset.
"""

import logging
from dataclasses import dataclass, field

from PIL import Image

from ..core.config import get_config

logger = logging.getLogger(__name__)

PIXEL_FORMAT_32ARGB = "32ARGB"
BYTES_PER_PIXEL = 4


@dataclass
class PixelBuffer:
    """Raw pixel memory with an explicit stride."""

    width: int
    height: int
    bytes_per_row: int
    data: bytearray = field(repr=False)
    pixel_format: str = PIXEL_FORMAT_32ARGB

    def row(self, y: int) -> bytes:
        """Return the pixel bytes of row y, without padding."""
        start = y * self.bytes_per_row
        return bytes(self.data[start : start + self.width * BYTES_PER_PIXEL])

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (a, r, g, b) value at x, y."""
        offset = y * self.bytes_per_row + x * BYTES_PER_PIXEL
        a, r, g, b = self.data[offset : offset + BYTES_PER_PIXEL]
        return a, r, g, b


def _aligned_stride(width: int, alignment: int) -> int:
    packed = width * BYTES_PER_PIXEL
    return -(-packed // alignment) * alignment


def to_pixel_buffer(image: Image.Image, row_alignment: int | None = None) -> PixelBuffer | None:
    """Render an image into a newly allocated ARGB pixel buffer.

    Args:
        image: Source image, any mode (converted to RGBA first)
        row_alignment: Pad rows to a multiple of this many bytes. Defaults to
            the configured pixel_buffer.row_alignment.

    Returns:
        PixelBuffer, or None if the buffer could not be allocated
    """
    if row_alignment is None:
        row_alignment = get_config().pixel_buffer.row_alignment

    width, height = image.size
    if width <= 0 or height <= 0 or row_alignment < 1:
        logger.debug(
            "Cannot allocate pixel buffer for %dx%d (alignment %d)", width, height, row_alignment
        )
        return None

    bytes_per_row = _aligned_stride(width, row_alignment)
    try:
        data = bytearray(bytes_per_row * height)
    except MemoryError:
        logger.debug("Pixel buffer allocation failed for %dx%d", width, height)
        return None

    # Reorder bands so tobytes() emits A, R, G, B per pixel
    rgba = image.convert("RGBA")
    r, g, b, a = rgba.split()
    packed = Image.merge("RGBA", (a, r, g, b)).tobytes()

    row_bytes = width * BYTES_PER_PIXEL
    if bytes_per_row == row_bytes:
        data[:] = packed
    else:
        for y in range(height):
            src = y * row_bytes
            dst = y * bytes_per_row
            data[dst : dst + row_bytes] = packed[src : src + row_bytes]

    return PixelBuffer(width=width, height=height, bytes_per_row=bytes_per_row, data=data)


def from_pixel_buffer(buffer: PixelBuffer) -> Image.Image | None:
    """Build an RGBA image from an ARGB pixel buffer.

    Returns:
        The image, or None if the buffer cannot be converted
    """
    if buffer.pixel_format != PIXEL_FORMAT_32ARGB:
        logger.debug("Unsupported pixel format: %s", buffer.pixel_format)
        return None

    width, height, stride = buffer.width, buffer.height, buffer.bytes_per_row
    if width <= 0 or height <= 0 or stride < width * BYTES_PER_PIXEL:
        logger.debug("Invalid pixel buffer geometry %dx%d stride %d", width, height, stride)
        return None
    if len(buffer.data) < stride * height:
        logger.debug("Pixel buffer data is truncated (%d bytes)", len(buffer.data))
        return None

    try:
        # Bands come out as (A, R, G, B) under RGBA labels
        argb = Image.frombuffer(
            "RGBA", (width, height), bytes(buffer.data), "raw", "RGBA", stride, 1
        )
        a, r, g, b = argb.split()
        return Image.merge("RGBA", (r, g, b, a))
    except (ValueError, OSError) as e:
        logger.debug("Pixel buffer conversion failed: %s", e)
        return None
