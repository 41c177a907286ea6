"""Shared test fixtures and helpers."""

from io import BytesIO
from pathlib import Path

import piexif
import pytest
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from fieldkit.core.config import set_config

XMP_APP1_HEADER = b"http://ns.adobe.com/xap/1.0/\x00"

DJI_DESCRIPTION = (
    '<rdf:Description rdf:about="" '
    'xmlns:drone-dji="http://www.dji.com/drone-dji/1.0/" '
    'drone-dji:RelativeAltitude="+45.20" '
    'drone-dji:GimbalYawDegree="-12.50"/>'
)

BAND_DESCRIPTION = (
    '<rdf:Description rdf:about="" xmlns:Camera="http://pix4d.com/camera/1.0/">'
    "<Camera:BandName><rdf:Seq>"
    "<rdf:li>Red</rdf:li><rdf:li>Green</rdf:li><rdf:li>Blue</rdf:li>"
    "</rdf:Seq></Camera:BandName>"
    "</rdf:Description>"
)


@pytest.fixture(autouse=True)
def reset_config(monkeypatch) -> None:
    """Give every test the built-in default configuration."""
    monkeypatch.delenv("FIELDKIT_CONFIG", raising=False)
    set_config(None)
    yield
    set_config(None)


def build_xmp(*descriptions: str) -> str:
    """Wrap rdf:Description elements into a complete XMP packet."""
    return "\n".join(
        [
            '<?xpacket begin="﻿" id="W5M0MpCehiHzreSzNTczkc9d"?>',
            '<x:xmpmeta xmlns:x="adobe:ns:meta/">',
            '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">',
            *descriptions,
            "</rdf:RDF>",
            "</x:xmpmeta>",
            '<?xpacket end="w"?>',
        ]
    )


def build_exif_bytes(
    latitude: tuple | None = ((10, 1), (0, 1), (0, 1)),
    latitude_ref: str | None = "N",
    longitude: tuple | None = ((20, 1), (0, 1), (0, 1)),
    longitude_ref: str | None = "E",
    make: str | None = "Sentera",
    focal_length: tuple | None = (88, 10),
) -> bytes:
    """Build EXIF bytes with optional GPS, TIFF and EXIF values."""
    exif_dict: dict[str, dict[int, object]] = {"0th": {}, "Exif": {}, "GPS": {}, "1st": {}}
    if latitude is not None:
        exif_dict["GPS"][piexif.GPSIFD.GPSLatitude] = latitude
    if latitude_ref is not None:
        exif_dict["GPS"][piexif.GPSIFD.GPSLatitudeRef] = latitude_ref
    if longitude is not None:
        exif_dict["GPS"][piexif.GPSIFD.GPSLongitude] = longitude
    if longitude_ref is not None:
        exif_dict["GPS"][piexif.GPSIFD.GPSLongitudeRef] = longitude_ref
    if make is not None:
        exif_dict["0th"][piexif.ImageIFD.Make] = make
    if focal_length is not None:
        exif_dict["Exif"][piexif.ExifIFD.FocalLength] = focal_length
    return piexif.dump(exif_dict)


def embed_xmp_in_jpeg(jpeg_bytes: bytes, xmp_xml: str) -> bytes:
    """Insert an XMP APP1 segment right after the JPEG SOI marker."""
    payload = XMP_APP1_HEADER + xmp_xml.encode("utf-8")
    segment = b"\xff\xe1" + (len(payload) + 2).to_bytes(2, byteorder="big") + payload
    return jpeg_bytes[:2] + segment + jpeg_bytes[2:]


def write_jpeg(
    path: Path,
    exif_bytes: bytes | None = None,
    xmp_xml: str | None = None,
    size: tuple[int, int] = (64, 48),
) -> Path:
    """Write a gray test JPEG with optional EXIF and XMP metadata."""
    img = Image.new("RGB", size, (128, 128, 128))
    output = BytesIO()
    if exif_bytes is not None:
        img.save(output, format="JPEG", exif=exif_bytes)
    else:
        img.save(output, format="JPEG")
    jpeg_bytes = output.getvalue()
    if xmp_xml is not None:
        jpeg_bytes = embed_xmp_in_jpeg(jpeg_bytes, xmp_xml)
    path.write_bytes(jpeg_bytes)
    return path


def write_png_with_xmp(path: Path, xmp_xml: str) -> Path:
    """Write a test PNG carrying XMP in an iTXt chunk."""
    info = PngInfo()
    info.add_itxt("XML:com.adobe.xmp", xmp_xml)
    Image.new("RGBA", (16, 16), (0, 0, 255, 255)).save(path, format="PNG", pnginfo=info)
    return path


@pytest.fixture
def gps_jpeg(tmp_path: Path) -> Path:
    """JPEG at 10°N 20°E, make Sentera, focal length 8.8 mm."""
    return write_jpeg(tmp_path / "gps.jpg", exif_bytes=build_exif_bytes())


@pytest.fixture
def dji_jpeg(tmp_path: Path) -> Path:
    """JPEG with DJI relative altitude and gimbal yaw XMP tags."""
    return write_jpeg(
        tmp_path / "dji.jpg", exif_bytes=build_exif_bytes(), xmp_xml=build_xmp(DJI_DESCRIPTION)
    )


@pytest.fixture
def plain_jpeg(tmp_path: Path) -> Path:
    """JPEG with no metadata at all."""
    return write_jpeg(tmp_path / "plain.jpg")
