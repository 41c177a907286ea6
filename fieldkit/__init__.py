"""Convenience helpers for field imagery: sequences, object fields, pixels and metadata."""

__version__ = "1.0.0"

from .core.config import Config, get_config, load_config, set_config
from .core.debug import configure_logging
from .core.errors import ImageProcessingError, NoImageError
from .image.buffer import PixelBuffer, from_pixel_buffer, to_pixel_buffer
from .image.drawing import (
    draw_text_overlay,
    image_with_alpha,
    resize,
    round_circle_image,
    solid_color_image,
)
from .image.metadata import (
    Coordinate,
    MetadataKey,
    band_name,
    focal_length,
    image_gps_only_property_dictionary,
    image_metadata_tags,
    image_property_dictionary,
    location_coordinate,
    make_name,
    metadata,
)
from .image.writer import write_metadata_to_png, write_metadata_to_png_file
from .image.xmp import MetadataTag
from .mirror.emptiness import NullableFields, is_empty
from .sequence.neighbors import enumerated_pairs, remove_adjacent_duplicates

__all__ = [
    "__version__",
    "Config",
    "get_config",
    "load_config",
    "set_config",
    "configure_logging",
    "ImageProcessingError",
    "NoImageError",
    "PixelBuffer",
    "to_pixel_buffer",
    "from_pixel_buffer",
    "draw_text_overlay",
    "round_circle_image",
    "image_with_alpha",
    "solid_color_image",
    "resize",
    "Coordinate",
    "MetadataKey",
    "MetadataTag",
    "image_property_dictionary",
    "image_gps_only_property_dictionary",
    "image_metadata_tags",
    "location_coordinate",
    "make_name",
    "focal_length",
    "band_name",
    "metadata",
    "write_metadata_to_png",
    "write_metadata_to_png_file",
    "NullableFields",
    "is_empty",
    "enumerated_pairs",
    "remove_adjacent_duplicates",
]
