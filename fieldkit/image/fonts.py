"""Font and color lookup for the drawing helpers."""

import logging
import platform
from pathlib import Path

from PIL import ImageColor, ImageFont

from ..core.config import get_config

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont
RGBA = tuple[int, int, int, int]
ColorLike = str | tuple[int, int, int] | tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)

SYSTEM_FONTS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",  # DejaVu Sans (common on Linux)
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",  # Liberation Sans
    "/System/Library/Fonts/Helvetica.ttc",  # macOS
    "/Library/Fonts/Arial.ttf",  # macOS
    "C:/Windows/Fonts/arial.ttf",  # Windows
]

LINUX_FONT_DIRS = ["/usr/share/fonts/truetype", "/usr/share/fonts/TTF"]


def load_font(size: int | None = None, font_path: str | None = None) -> Font:
    """Load a TrueType font with fallback to system fonts.

    Args:
        size: Font size in pixels. Defaults to the configured drawing.font_size.
        font_path: Optional path to a font file (supports ~ expansion). Defaults
            to the configured drawing.font_path.
    """
    drawing = get_config().drawing
    if size is None:
        size = drawing.font_size
    if font_path is None:
        font_path = drawing.font_path

    if font_path:
        expanded_path = Path(font_path).expanduser()
        if expanded_path.exists():
            try:
                return ImageFont.truetype(str(expanded_path), size)
            except OSError as e:
                logger.warning("Failed to load font from %s: %s", expanded_path, e)
        else:
            logger.warning("Configured font path does not exist: %s", expanded_path)

    for font_file in SYSTEM_FONTS:
        if Path(font_file).exists():
            try:
                return ImageFont.truetype(font_file, size)
            except OSError as e:
                logger.debug("Failed to load system font %s: %s", font_file, e)

    # Last resort: any TTF font in common system font directories
    if platform.system() == "Linux":
        for font_dir in LINUX_FONT_DIRS:
            font_dir_path = Path(font_dir)
            if not font_dir_path.exists():
                continue
            for found_font_path in font_dir_path.rglob("*.ttf"):
                try:
                    return ImageFont.truetype(str(found_font_path), size)
                except OSError:
                    continue

    logger.debug("Could not load any TrueType font, using Pillow's default font")
    try:
        return ImageFont.load_default(size)
    except TypeError:
        # Pillow < 10.1 has no sized default font
        return ImageFont.load_default()


def parse_color(color: ColorLike) -> RGBA:
    """Parse a color name, hex string or RGB(A) tuple into an RGBA tuple.

    Unknown color strings fall back to white.
    """
    if isinstance(color, tuple):
        if len(color) == 3:
            r, g, b = color
            return (r, g, b, 255)
        if len(color) == 4:
            r, g, b, a = color
            return (r, g, b, a)
        raise ValueError(f"Color tuple must have 3 or 4 components, got {len(color)}")

    try:
        rgb = ImageColor.getrgb(color)
    except ValueError:
        logger.debug("Unknown color %r, using white", color)
        return WHITE
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    return (rgb[0], rgb[1], rgb[2], rgb[3])
