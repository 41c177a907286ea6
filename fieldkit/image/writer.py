"""PNG metadata writing.

The caller hands over one flat property mapping. It is wrapped under the
GPS, TIFF, EXIF and IPTC namespaces, and each namespace then encodes the
keys its own tag table defines:

- GPS, TIFF and EXIF go into the PNG ``eXIf`` chunk (built with piexif),
- IPTC goes into PNG text chunks.

Keys a namespace does not define are skipped for that namespace. A key such
as ``Make`` therefore lands in the TIFF IFD only, while ``Latitude`` lands
in the GPS IFD.
"""

import logging
import math
import os
import struct
from fractions import Fraction
from typing import Any

import piexif
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from ..core.config import get_config

logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]

GPS_NAMESPACE = "GPS"
TIFF_NAMESPACE = "TIFF"
EXIF_NAMESPACE = "Exif"
IPTC_NAMESPACE = "IPTC"
NAMESPACES = (GPS_NAMESPACE, TIFF_NAMESPACE, EXIF_NAMESPACE, IPTC_NAMESPACE)

# piexif IFD name for each EXIF-backed namespace
_IFD_FOR_NAMESPACE = {
    GPS_NAMESPACE: "GPS",
    TIFF_NAMESPACE: "0th",
    EXIF_NAMESPACE: "Exif",
}
_TAG_TABLE_FOR_IFD = {"GPS": "GPS", "0th": "Image", "Exif": "Exif"}

# Pointer tags piexif manages itself
_POINTER_NAMES = {"ExifTag", "GPSTag", "InteroperabilityTag"}

_DMS_TAGS = {"GPSLatitude", "GPSLongitude", "GPSDestLatitude", "GPSDestLongitude"}

# Value bounds of the binary EXIF types
_INTEGER_RANGES = {
    piexif.TYPES.Byte: (0, 0xFF),
    piexif.TYPES.Short: (0, 0xFFFF),
    piexif.TYPES.Long: (0, 0xFFFFFFFF),
    piexif.TYPES.SLong: (-0x80000000, 0x7FFFFFFF),
}
_RATIONAL_RANGE = (0, 0xFFFFFFFF)
_SRATIONAL_RANGE = (-0x80000000, 0x7FFFFFFF)
_RATIONAL_TYPES = {piexif.TYPES.Rational, piexif.TYPES.SRational}

PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}


def metadata_from_properties(properties: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Wrap a flat property mapping under each metadata namespace."""
    return {namespace: dict(properties) for namespace in NAMESPACES}


def convert_gps_coordinate(value: float) -> tuple[tuple[int, int], ...]:
    """Convert decimal degrees to an EXIF (degrees, minutes, seconds) rational triple.

    The sign is dropped; it is carried by the matching *Ref tag.

    Raises:
        ValueError: If value is not finite or beyond 180 degrees
    """
    if not math.isfinite(value) or abs(value) > 180:
        raise ValueError(f"invalid GPS coordinate {value}")
    value_abs = abs(value)
    degrees = int(value_abs)
    minutes = int((value_abs - degrees) * 60)
    seconds = (value_abs - degrees - minutes / 60) * 3600

    # Seconds with 100 as denominator for 2 decimal places precision
    return ((degrees, 1), (minutes, 1), (int(round(seconds * 100)), 100))


def _to_rational(value: Any, signed: bool) -> tuple[int, int]:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"non-finite value {number} for rational")
    if not signed and number < 0:
        raise ValueError(f"negative value {number} for unsigned rational")
    low, high = _SRATIONAL_RANGE if signed else _RATIONAL_RANGE
    # Keep the numerator within 32 bits
    max_denominator = max(1, min(1_000_000, int(high // max(1.0, abs(number) + 1))))
    fraction = Fraction(number).limit_denominator(max_denominator)
    if not low <= fraction.numerator <= high:
        raise ValueError(f"value {number} does not fit a 32-bit rational")
    return fraction.numerator, fraction.denominator


def _to_integer(value: Any, tag_type: int) -> int:
    number = int(value)
    low, high = _INTEGER_RANGES[tag_type]
    if not low <= number <= high:
        raise ValueError(f"value {number} out of range {low}..{high}")
    return number


def _encode_value(name: str, tag_type: int, value: Any) -> Any:
    if name in _DMS_TAGS:
        return convert_gps_coordinate(float(value))

    if tag_type == piexif.TYPES.Ascii:
        return str(value).encode("latin-1")

    if tag_type == piexif.TYPES.Undefined:
        if isinstance(value, bytes):
            return value
        return str(value).encode("latin-1")

    if tag_type in _INTEGER_RANGES:
        if isinstance(value, bytes):
            return tuple(_to_integer(v, tag_type) for v in value)
        if isinstance(value, tuple | list):
            return tuple(_to_integer(v, tag_type) for v in value)
        return (_to_integer(value, tag_type),)

    if tag_type in _RATIONAL_TYPES:
        signed = tag_type == piexif.TYPES.SRational
        if isinstance(value, tuple | list):
            return tuple(_to_rational(v, signed) for v in value)
        return _to_rational(value, signed)

    raise ValueError(f"unsupported EXIF type {tag_type}")


def _tag_ids(ifd_name: str) -> dict[str, tuple[int, int]]:
    table = piexif.TAGS[_TAG_TABLE_FOR_IFD[ifd_name]]
    return {
        info["name"]: (tag, info["type"])
        for tag, info in table.items()
        if info["name"] not in _POINTER_NAMES
    }


def build_exif_dict(metadata: dict[str, dict[str, Any]]) -> dict[str, dict[int, Any]]:
    """Build a piexif dictionary from namespaced metadata.

    Args:
        metadata: Mapping of namespace name to properties, see metadata_from_properties()

    Returns:
        Dictionary suitable for piexif.dump()
    """
    exif_dict: dict[str, dict[int, Any]] = {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}}

    for namespace, ifd_name in _IFD_FOR_NAMESPACE.items():
        properties = metadata.get(namespace, {})
        tag_ids = _tag_ids(ifd_name)
        for key, value in properties.items():
            # GPS property names are stored without their prefix
            name = f"GPS{key}" if ifd_name == "GPS" and not key.startswith("GPS") else key
            if name not in tag_ids:
                continue
            tag, tag_type = tag_ids[name]
            try:
                exif_dict[ifd_name][tag] = _encode_value(name, tag_type, value)
            except (TypeError, ValueError, OverflowError) as e:
                logger.debug("Skipping %s property %s: %s", namespace, key, e)

    return exif_dict


def build_png_info(metadata: dict[str, dict[str, Any]]) -> PngInfo:
    """Build PNG text chunks from the IPTC namespace."""
    info = PngInfo()
    for key, value in metadata.get(IPTC_NAMESPACE, {}).items():
        try:
            info.add_text(key, str(value))
        except (UnicodeEncodeError, ValueError) as e:
            logger.debug("Skipping IPTC property %s: %s", key, e)
    return info


def write_metadata_to_png(
    image: Image.Image, path: PathLike, properties: dict[str, Any]
) -> bool:
    """Write image as a PNG at path with properties embedded as metadata.

    Returns:
        True on success, False if the destination could not be created or written
    """
    metadata = metadata_from_properties(properties)

    try:
        exif_bytes = piexif.dump(build_exif_dict(metadata))
    except (TypeError, ValueError, KeyError, OverflowError, struct.error) as e:
        logger.debug("Failed to encode EXIF metadata for %s: %s", path, e)
        return False

    if image.mode not in PNG_MODES:
        image = image.convert("RGBA")

    try:
        image.save(
            path,
            format="PNG",
            exif=exif_bytes,
            pnginfo=build_png_info(metadata),
            compress_level=get_config().metadata.png_compress_level,
        )
    except OSError as e:
        logger.debug("Can't create PNG destination %s: %s", path, e)
        return False
    return True


def write_metadata_to_png_file(path: PathLike, properties: dict[str, Any]) -> bool:
    """Re-write the image at path as a PNG carrying properties as metadata.

    Returns:
        False if the existing file cannot be loaded or written
    """
    try:
        with Image.open(path) as img:
            img.load()
            bitmap = img.copy()
    except (OSError, ValueError) as e:
        logger.debug("Can't load image %s: %s", path, e)
        return False

    return write_metadata_to_png(bitmap, path, properties)
