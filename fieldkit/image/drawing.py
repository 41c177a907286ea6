"""Simple image drawing: text overlays, circles, solid fills, alpha and resize.

Every function returns a new image and leaves its input untouched.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from PIL import Image, ImageDraw

from ..core.config import get_config
from ..core.errors import NoImageError
from .fonts import ColorLike, Font, load_font, parse_color

logger = logging.getLogger(__name__)

Size = tuple[float, float]

TRANSPARENT = (0, 0, 0, 0)

RESAMPLING_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


def _pixel_size(size: Size) -> tuple[int, int]:
    width, height = size
    return max(0, round(width)), max(0, round(height))


@contextmanager
def graphics_context(size: Size) -> Iterator[tuple[Image.Image, ImageDraw.ImageDraw]]:
    """Open a transparent RGBA canvas for drawing.

    Any Pillow failure inside the block, and an empty canvas size, is raised
    as NoImageError. The canvas is closed whenever the block fails.
    """
    width, height = _pixel_size(size)
    if width == 0 or height == 0:
        raise NoImageError(f"no image produced for a {width}x{height} canvas")

    canvas = Image.new("RGBA", (width, height), TRANSPARENT)
    try:
        yield canvas, ImageDraw.Draw(canvas)
    except (OSError, ValueError, TypeError) as e:
        canvas.close()
        raise NoImageError(f"no image produced: {e}") from e
    except BaseException:
        canvas.close()
        raise


def draw_text_overlay(
    image: Image.Image,
    text: str,
    font: Font | None = None,
    color: ColorLike | None = None,
) -> Image.Image:
    """Draw text centered on a copy of image.

    Args:
        image: Background image
        text: Text to draw
        font: Font to use. Defaults to load_font() with the configured size.
        color: Text color. Defaults to the configured drawing.text_color (white).

    Raises:
        NoImageError: If the canvas produced no image
    """
    drawing = get_config().drawing
    if font is None:
        font = load_font(drawing.font_size, drawing.font_path)
    fill = parse_color(color if color is not None else drawing.text_color)

    with graphics_context(image.size) as (canvas, draw):
        canvas.alpha_composite(image.convert("RGBA"))

        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        text_width = right - left
        text_height = bottom - top
        x = canvas.width / 2.0 - text_width / 2.0 - left
        y = canvas.height / 2.0 - text_height / 2.0 - top
        draw.text((x, y), text, fill=fill, font=font)

    return canvas


def round_circle_image(
    diameter: float,
    color: ColorLike,
    text: str | None = None,
    font: Font | None = None,
    text_color: ColorLike | None = None,
) -> Image.Image:
    """Draw a filled circle on a transparent square, optionally with centered text.

    Raises:
        NoImageError: Only when text is given and the overlay fails
    """
    side = max(0, round(diameter))
    circle = Image.new("RGBA", (side, side), TRANSPARENT)
    if side > 0:
        ImageDraw.Draw(circle).ellipse((0, 0, side - 1, side - 1), fill=parse_color(color))

    if text is None:
        return circle
    return draw_text_overlay(circle, text, font=font, color=text_color)


def image_with_alpha(image: Image.Image, alpha: float) -> Image.Image:
    """Return a copy of image with its opacity scaled by alpha (0 to 1).

    Falls back to a blank transparent image of the same size if rendering fails.
    """
    alpha = min(max(alpha, 0.0), 1.0)
    try:
        rgba = image.convert("RGBA")
        rgba.putalpha(rgba.getchannel("A").point(lambda value: round(value * alpha)))
        return rgba
    except (OSError, ValueError) as e:
        logger.debug("Alpha rendering failed, returning blank image: %s", e)
        return Image.new("RGBA", image.size, TRANSPARENT)


def solid_color_image(color: ColorLike, size: Size = (1, 1)) -> Image.Image:
    """Return an image of the given size filled with color."""
    return Image.new("RGBA", _pixel_size(size), parse_color(color))


def resize(image: Image.Image, size: Size, resample: str | None = None) -> Image.Image:
    """Return image re-rendered at size.

    Args:
        image: Source image
        size: Target (width, height) in pixels
        resample: Filter name (nearest, bilinear, bicubic, lanczos). Defaults
            to the configured drawing.resample.
    """
    name = (resample or get_config().drawing.resample).lower()
    if name not in RESAMPLING_FILTERS:
        raise ValueError(f"Unknown resampling filter: {resample}")
    return image.resize(_pixel_size(size), RESAMPLING_FILTERS[name])
