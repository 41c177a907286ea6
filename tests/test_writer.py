"""Tests for PNG metadata writing."""

import struct
from unittest.mock import patch

import piexif
import pytest
from PIL import Image

from fieldkit.core.config import Config, MetadataConfig, set_config
from fieldkit.image.metadata import (
    focal_length,
    image_property_dictionary,
    location_coordinate,
    make_name,
)
from fieldkit.image.writer import (
    NAMESPACES,
    build_exif_dict,
    build_png_info,
    convert_gps_coordinate,
    metadata_from_properties,
    write_metadata_to_png,
    write_metadata_to_png_file,
)

PROPERTIES = {
    "Latitude": 48.8566,
    "LatitudeRef": "N",
    "Longitude": 2.3522,
    "LongitudeRef": "W",
    "Make": "Sentera",
    "FocalLength": 8.8,
}


def test_metadata_from_properties_duplicates_mapping() -> None:
    """Test the flat mapping is copied under every namespace."""
    metadata = metadata_from_properties(PROPERTIES)

    assert set(metadata) == set(NAMESPACES) == {"GPS", "TIFF", "Exif", "IPTC"}
    for properties in metadata.values():
        assert properties == PROPERTIES
        assert properties is not PROPERTIES


def test_convert_gps_coordinate() -> None:
    """Test decimal degrees become a DMS rational triple."""
    degrees, minutes, seconds = convert_gps_coordinate(48.8566)

    assert degrees == (48, 1)
    assert minutes == (51, 1)
    assert seconds[1] == 100
    assert seconds[0] / 100 == pytest.approx(23.76, abs=0.01)


def test_convert_gps_coordinate_drops_sign() -> None:
    """Test the sign is left to the reference tag."""
    assert convert_gps_coordinate(-2.5) == convert_gps_coordinate(2.5)


def test_build_exif_dict_routes_keys_by_namespace() -> None:
    """Test each key lands only in the IFD that defines it."""
    exif_dict = build_exif_dict(metadata_from_properties(PROPERTIES))

    assert exif_dict["GPS"][piexif.GPSIFD.GPSLatitudeRef] == b"N"
    assert exif_dict["GPS"][piexif.GPSIFD.GPSLatitude][0] == (48, 1)
    assert exif_dict["0th"][piexif.ImageIFD.Make] == b"Sentera"
    assert exif_dict["Exif"][piexif.ExifIFD.FocalLength] == (44, 5)
    assert piexif.ImageIFD.Make not in exif_dict["Exif"]


def test_build_exif_dict_skips_unknown_and_invalid_values() -> None:
    """Test unknown names and unencodable values are left out."""
    metadata = metadata_from_properties(
        {"NotATag": "x", "FocalLength": "long", "ImageWidth": 640}
    )

    exif_dict = build_exif_dict(metadata)

    assert piexif.ExifIFD.FocalLength not in exif_dict["Exif"]
    assert exif_dict["0th"][piexif.ImageIFD.ImageWidth] == (640,)
    assert exif_dict["GPS"] == {}
    assert exif_dict["Exif"] == {}


def test_build_png_info_uses_iptc_namespace() -> None:
    """Test text chunks come from the IPTC namespace only."""
    info = build_png_info({"IPTC": {"Caption": "field 7"}, "TIFF": {"Make": "Acme"}})

    assert [chunk[0] for chunk in info.chunks] == [b"tEXt"]
    assert b"Caption\x00field 7" in info.chunks[0][1]


def test_write_metadata_round_trip(tmp_path) -> None:
    """Test written metadata is read back by the metadata readers."""
    path = tmp_path / "out.png"

    assert write_metadata_to_png(Image.new("RGB", (8, 8), "green"), path, PROPERTIES) is True

    properties = image_property_dictionary(path)
    assert properties is not None
    assert properties["Latitude"] == pytest.approx(48.8566, abs=1e-4)
    assert properties["LatitudeRef"] == "N"
    assert make_name(path) == "Sentera"
    assert focal_length(path) == pytest.approx(8.8)

    coordinate = location_coordinate(path)
    assert coordinate is not None
    assert coordinate.latitude == pytest.approx(48.8566, abs=1e-4)
    assert coordinate.longitude == pytest.approx(-2.3522, abs=1e-4)


def test_write_metadata_text_chunks(tmp_path) -> None:
    """Test IPTC properties are stored as PNG text."""
    path = tmp_path / "text.png"

    assert write_metadata_to_png(Image.new("RGBA", (4, 4)), path, {"Make": "Sentera"})

    with Image.open(path) as img:
        assert img.format == "PNG"
        assert img.text["Make"] == "Sentera"


def test_write_metadata_converts_unsupported_mode(tmp_path) -> None:
    """Test modes PNG cannot store are converted before saving."""
    path = tmp_path / "cmyk.png"

    assert write_metadata_to_png(Image.new("CMYK", (4, 4)), path, {})

    with Image.open(path) as img:
        assert img.mode == "RGBA"


def test_write_metadata_uses_configured_compression(tmp_path) -> None:
    """Test the PNG compression level comes from configuration."""
    set_config(Config(metadata=MetadataConfig(png_compress_level=0)))
    image = Image.effect_noise((64, 64), 50).convert("RGB")

    assert write_metadata_to_png(image, tmp_path / "raw.png", {})
    set_config(Config(metadata=MetadataConfig(png_compress_level=9)))
    assert write_metadata_to_png(image, tmp_path / "packed.png", {})

    assert (tmp_path / "raw.png").stat().st_size > (tmp_path / "packed.png").stat().st_size


def test_write_metadata_missing_directory(tmp_path) -> None:
    """Test an uncreatable destination gives False."""
    path = tmp_path / "missing" / "out.png"

    assert write_metadata_to_png(Image.new("RGB", (2, 2)), path, PROPERTIES) is False
    assert not path.exists()


def test_write_metadata_to_png_file_rewrites_jpeg(gps_jpeg) -> None:
    """Test an existing file is re-encoded as PNG with new properties."""
    assert write_metadata_to_png_file(gps_jpeg, {"Make": "Parrot"}) is True

    with Image.open(gps_jpeg) as img:
        assert img.format == "PNG"
        assert img.size == (64, 48)
    assert make_name(gps_jpeg) is None
    assert image_property_dictionary(gps_jpeg) is None


def test_write_metadata_to_png_file_not_an_image(tmp_path) -> None:
    """Test a file that is not an image gives False."""
    path = tmp_path / "notes.txt"
    path.write_text("hello")

    assert write_metadata_to_png_file(path, PROPERTIES) is False
    assert path.read_text() == "hello"


@pytest.mark.parametrize(
    "properties",
    [
        {"Orientation": 70000},
        {"Orientation": -1},
        {"FocalLength": float("inf")},
        {"FocalLength": float("nan")},
        {"FocalLength": 1e12},
        {"Altitude": 1e12},
        {"Latitude": float("inf")},
    ],
)
def test_build_exif_dict_skips_out_of_range_values(properties) -> None:
    """Test values that do not fit their EXIF type are left out."""
    exif_dict = build_exif_dict(metadata_from_properties(properties))

    assert exif_dict == {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}}


def test_build_exif_dict_keeps_in_range_values() -> None:
    """Test boundary values of integer and rational types are kept."""
    exif_dict = build_exif_dict(
        metadata_from_properties({"Orientation": 65535, "Altitude": 4_000_000.5})
    )

    assert exif_dict["0th"][piexif.ImageIFD.Orientation] == (65535,)
    numerator, denominator = exif_dict["GPS"][piexif.GPSIFD.GPSAltitude]
    assert numerator / denominator == pytest.approx(4_000_000.5)
    assert numerator <= 0xFFFFFFFF


def test_write_metadata_out_of_range_values(tmp_path) -> None:
    """Test out-of-range values are skipped and the PNG is still written."""
    path = tmp_path / "range.png"
    properties = {
        "Orientation": 70000,
        "FocalLength": float("inf"),
        "Altitude": 1e12,
        "Make": "Sentera",
    }

    assert write_metadata_to_png(Image.new("RGB", (4, 4)), path, properties) is True

    with Image.open(path) as img:
        exif = img.getexif()
        assert exif[piexif.ImageIFD.Make] == "Sentera"
        assert piexif.ImageIFD.Orientation not in exif


def test_write_metadata_encoding_failure(tmp_path) -> None:
    """Test a failing EXIF encoder gives False instead of raising."""
    path = tmp_path / "fail.png"

    with patch("fieldkit.image.writer.piexif.dump", side_effect=struct.error("bad")):
        assert write_metadata_to_png(Image.new("RGB", (4, 4)), path, PROPERTIES) is False

    assert not path.exists()
