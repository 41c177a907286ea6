"""Image metadata extraction.

Reads standard EXIF/TIFF/GPS dictionaries through Pillow and vendor XMP
tags (drone relative altitude and gimbal yaw, multispectral band names).

All readers take a file path, open the image lazily (no pixel decode), and
close it before returning. They never raise for unreadable or incomplete
files: missing data is reported as None (or an empty mapping) and a
diagnostic is logged at DEBUG level on the given logger.
"""

import logging
import math
import os
import xml.etree.ElementTree as ET
from enum import Enum
from numbers import Rational
from typing import Any, NamedTuple

from PIL import Image
from PIL.ExifTags import GPSTAGS, IFD, TAGS

from .xmp import MetadataTag, parse_xmp_tags, read_xmp_packet

_logger = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]

GPS_DICTIONARY = "GPS"
TIFF_DICTIONARY = "TIFF"
EXIF_DICTIONARY = "Exif"

# IFD pointers and embedded blobs that are not TIFF properties themselves
_NON_PROPERTY_TAGS = {
    int(IFD.Exif),
    int(IFD.GPSInfo),
    int(IFD.Interop),
    0x02BC,  # XMLPacket
    0x83BB,  # IPTC/NAA
    0x8773,  # InterColorProfile
}

# GPS tags holding (degrees, minutes, seconds)
_DMS_KEYS = {"Latitude", "Longitude", "DestLatitude", "DestLongitude"}


class MetadataKey(str, Enum):
    """Names of the metadata values this module extracts."""

    RELATIVE_ALTITUDE = "RelativeAltitude"
    GIMBAL_YAW_DEGREE = "GimbalYawDegree"
    BAND_NAME = "BandName"
    MAKE = "Make"
    FOCAL_LENGTH = "FocalLength"


class Coordinate(NamedTuple):
    """Geographic coordinate in decimal degrees."""

    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """Check that both components are finite and within ±90 / ±180."""
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )


def _normalize(value: Any) -> Any:
    if isinstance(value, Rational) and not isinstance(value, int):
        return float(value)
    if isinstance(value, str):
        return value.rstrip("\x00")
    if isinstance(value, tuple):
        return tuple(_normalize(v) for v in value)
    return value


def dms_to_decimal(dms: tuple) -> float | None:
    """Convert a (degrees, minutes, seconds) tuple to decimal degrees."""
    if len(dms) != 3:
        return None
    try:
        degrees, minutes, seconds = (float(part) for part in dms)
    except (TypeError, ValueError):
        return None
    return degrees + minutes / 60 + seconds / 3600


def _gps_dictionary(raw: dict[int, Any]) -> dict[str, Any]:
    gps: dict[str, Any] = {}
    for tag, value in raw.items():
        name = GPSTAGS.get(tag, str(tag))
        if name.startswith("GPS"):
            name = name[3:]
        value = _normalize(value)
        if name in _DMS_KEYS and isinstance(value, tuple):
            decimal = dms_to_decimal(value)
            value = decimal if decimal is not None else value
        gps[name] = value
    return gps


def _tag_dictionary(raw: dict[int, Any]) -> dict[str, Any]:
    return {
        TAGS.get(tag, str(tag)): _normalize(value)
        for tag, value in raw.items()
        if tag not in _NON_PROPERTY_TAGS
    }


def read_property_dictionaries(path: PathLike) -> dict[str, dict[str, Any]] | None:
    """Read the GPS, TIFF and EXIF dictionaries of the first frame.

    Absent dictionaries are omitted from the result.

    Returns:
        Mapping of dictionary name to properties, or None if the file cannot be opened
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            gps = _gps_dictionary(exif.get_ifd(IFD.GPSInfo))
            tiff = _tag_dictionary(dict(exif.items()))
            exif_ifd = _tag_dictionary(exif.get_ifd(IFD.Exif))
    except (OSError, ValueError, SyntaxError) as e:
        # Pillow reports malformed EXIF blocks as SyntaxError
        _logger.debug("Cannot read image properties from %s: %s", path, e)
        return None

    dictionaries: dict[str, dict[str, Any]] = {}
    if gps:
        dictionaries[GPS_DICTIONARY] = gps
    if tiff:
        dictionaries[TIFF_DICTIONARY] = tiff
    if exif_ifd:
        dictionaries[EXIF_DICTIONARY] = exif_ifd
    return dictionaries


def merge_property_dictionaries(*dictionaries: dict[str, Any]) -> dict[str, Any]:
    """Merge dictionaries in order, keeping the first value seen for each key."""
    merged: dict[str, Any] = {}
    for dictionary in dictionaries:
        for key, value in dictionary.items():
            merged.setdefault(key, value)
    return merged


def image_gps_only_property_dictionary(
    path: PathLike, logger: logging.Logger | None = None
) -> dict[str, Any] | None:
    """Return the GPS dictionary of the image, or None if it has none."""
    log = logger or _logger
    dictionaries = read_property_dictionaries(path)
    if dictionaries is None or GPS_DICTIONARY not in dictionaries:
        log.debug("Can't get GPS dictionary from %s", path)
        return None
    return dictionaries[GPS_DICTIONARY]


def image_property_dictionary(
    path: PathLike, logger: logging.Logger | None = None
) -> dict[str, Any] | None:
    """Return the GPS, TIFF and EXIF properties merged into one mapping.

    GPS values win over TIFF values, which win over EXIF values. Returns None
    if the file cannot be read or lacks a GPS or TIFF dictionary; a missing
    EXIF dictionary counts as empty.
    """
    log = logger or _logger
    dictionaries = read_property_dictionaries(path)
    if dictionaries is None:
        return None

    gps = dictionaries.get(GPS_DICTIONARY)
    tiff = dictionaries.get(TIFF_DICTIONARY)
    if gps is None or tiff is None:
        log.debug("Can't get GPS and TIFF dictionaries from %s", path)
        return None

    return merge_property_dictionaries(gps, tiff, dictionaries.get(EXIF_DICTIONARY, {}))


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def location_coordinate(path: PathLike, logger: logging.Logger | None = None) -> Coordinate | None:
    """Return the signed GPS coordinate of the image.

    Latitude is negated for an "S" reference and longitude for "W".
    Returns None if a field is missing or mistyped, or if the coordinate is
    out of range.
    """
    log = logger or _logger
    gps = image_gps_only_property_dictionary(path, logger=log)
    if gps is None:
        log.debug("Can't get GPS property dictionary from %s", path)
        return None

    lat = gps.get("Latitude")
    lon = gps.get("Longitude")
    north_south = gps.get("LatitudeRef")
    east_west = gps.get("LongitudeRef")
    if not (
        _is_number(lat)
        and _is_number(lon)
        and isinstance(north_south, str)
        and isinstance(east_west, str)
    ):
        log.debug("Unable to get GPS coordinate fields from %s", path)
        return None

    latitude = float(lat)
    longitude = float(lon)
    coordinate = Coordinate(
        latitude=-latitude if north_south == "S" else latitude,
        longitude=-longitude if east_west == "W" else longitude,
    )
    if not coordinate.is_valid():
        log.debug("Invalid coordinate %s in %s", coordinate, path)
        return None
    return coordinate


def make_name(path: PathLike, logger: logging.Logger | None = None) -> str | None:
    """Return the camera make, if present."""
    properties = image_property_dictionary(path, logger=logger)
    value = properties.get(MetadataKey.MAKE.value) if properties else None
    return value if isinstance(value, str) else None


def focal_length(path: PathLike, logger: logging.Logger | None = None) -> float | None:
    """Return the lens focal length in millimetres, if present."""
    properties = image_property_dictionary(path, logger=logger)
    value = properties.get(MetadataKey.FOCAL_LENGTH.value) if properties else None
    return float(value) if _is_number(value) else None


def image_metadata_tags(
    path: PathLike, logger: logging.Logger | None = None
) -> list[MetadataTag] | None:
    """Return the image's XMP tags, or None if it has no readable XMP packet."""
    log = logger or _logger
    try:
        with Image.open(path) as img:
            packet = read_xmp_packet(img)
    except (OSError, ValueError) as e:
        log.debug("Can't open %s: %s", path, e)
        return None

    if packet is None:
        log.debug("Can't get metadata from %s", path)
        return None

    try:
        return parse_xmp_tags(packet)
    except ET.ParseError as e:
        log.debug("Can't get metadata tags from %s: %s", path, e)
        return None


def _find_tag(tags: list[MetadataTag], key: MetadataKey) -> MetadataTag | None:
    found = None
    for tag in tags:
        if tag.name == key.value:
            found = tag
    return found


def band_name(path: PathLike, logger: logging.Logger | None = None) -> str | None:
    """Return the comma-separated spectral band names of the image.

    The BandName tag must hold an array; items that are not plain strings
    are reported as "unknown".
    """
    tags = image_metadata_tags(path, logger=logger)
    if tags is None:
        return None

    tag = _find_tag(tags, MetadataKey.BAND_NAME)
    if tag is None or not isinstance(tag.value, list):
        return None

    joined = "".join(
        f"{item.value if isinstance(item.value, str) else 'unknown'}, " for item in tag.value
    )
    if len(joined) > 2:
        return joined[:-2]
    return None


def _parse_float(tag: MetadataTag | None) -> float | None:
    if tag is None or not isinstance(tag.value, str):
        return None
    try:
        return float(tag.value)
    except ValueError:
        return None


def metadata(path: PathLike, logger: logging.Logger | None = None) -> dict[MetadataKey, float]:
    """Return relative altitude and gimbal yaw from the image's XMP tags.

    Both values must be present and numeric; otherwise the result is empty.
    """
    log = logger or _logger
    tags = image_metadata_tags(path, logger=log)
    if tags is None:
        return {}

    altitude = _parse_float(_find_tag(tags, MetadataKey.RELATIVE_ALTITUDE))
    if altitude is None:
        log.debug("Can't get altitude from %s", path)
    yaw = _parse_float(_find_tag(tags, MetadataKey.GIMBAL_YAW_DEGREE))
    if yaw is None:
        log.debug("Can't get yaw from %s", path)

    if altitude is None or yaw is None:
        return {}
    return {
        MetadataKey.RELATIVE_ALTITUDE: altitude,
        MetadataKey.GIMBAL_YAW_DEGREE: yaw,
    }
