"""Image conversion, metadata and drawing."""

from .buffer import PixelBuffer, from_pixel_buffer, to_pixel_buffer
from .drawing import (
    draw_text_overlay,
    graphics_context,
    image_with_alpha,
    resize,
    round_circle_image,
    solid_color_image,
)
from .fonts import load_font, parse_color
from .metadata import (
    Coordinate,
    MetadataKey,
    band_name,
    focal_length,
    image_gps_only_property_dictionary,
    image_metadata_tags,
    image_property_dictionary,
    location_coordinate,
    make_name,
    merge_property_dictionaries,
    metadata,
)
from .writer import metadata_from_properties, write_metadata_to_png, write_metadata_to_png_file
from .xmp import MetadataTag, parse_xmp_tags

__all__ = [
    "Coordinate",
    "MetadataKey",
    "MetadataTag",
    "PixelBuffer",
    "band_name",
    "draw_text_overlay",
    "focal_length",
    "from_pixel_buffer",
    "graphics_context",
    "image_gps_only_property_dictionary",
    "image_metadata_tags",
    "image_property_dictionary",
    "image_with_alpha",
    "load_font",
    "location_coordinate",
    "make_name",
    "merge_property_dictionaries",
    "metadata",
    "metadata_from_properties",
    "parse_color",
    "parse_xmp_tags",
    "resize",
    "round_circle_image",
    "solid_color_image",
    "to_pixel_buffer",
    "write_metadata_to_png",
    "write_metadata_to_png_file",
]
