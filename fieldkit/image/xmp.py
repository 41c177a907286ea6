"""XMP packet lookup and tag parsing.

Vendor cameras store their custom values (relative altitude, gimbal yaw,
spectral band names) as XMP properties rather than EXIF tags. This module
finds the XMP packet Pillow exposes for a file and flattens its
``rdf:Description`` properties into a list of ``MetadataTag``.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Literal

from PIL import Image

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XMP_APP1_HEADER = b"http://ns.adobe.com/xap/1.0/\x00"
XMP_TIFF_TAG = 0x02BC

_CONTAINERS = ("Seq", "Bag", "Alt")
_XMPMETA_RE = re.compile(r"<x:xmpmeta[^>]*>.*?</x:xmpmeta>", re.DOTALL)
_RDF_RE = re.compile(r"<rdf:RDF[^>]*>.*?</rdf:RDF>", re.DOTALL)

TagType = Literal["string", "array", "structure"]


@dataclass
class MetadataTag:
    """A named XMP property.

    ``value`` is a string for simple properties and a list of tags for
    array containers (rdf:Seq, rdf:Bag, rdf:Alt) and structures.
    """

    name: str
    namespace: str = ""
    value: "str | list[MetadataTag]" = ""
    type: TagType = "string"

    @property
    def is_array(self) -> bool:
        return self.type == "array"


def _split_name(qualified: str) -> tuple[str, str]:
    if qualified.startswith("{"):
        namespace, _, local = qualified[1:].partition("}")
        return namespace, local
    return "", qualified


def read_xmp_packet(img: Image.Image) -> str | None:
    """Return the raw XMP packet of an opened image, if it has one."""
    candidates: list[object] = [img.info.get("xmp"), img.info.get("XML:com.adobe.xmp")]

    # JPEG APP1 segments, for Pillow versions that do not fill info["xmp"]
    for marker, payload in getattr(img, "applist", []):
        if marker == "APP1" and payload.startswith(XMP_APP1_HEADER):
            candidates.append(payload[len(XMP_APP1_HEADER) :])

    tag_v2 = getattr(img, "tag_v2", None)
    if tag_v2 is not None:
        candidates.append(tag_v2.get(XMP_TIFF_TAG))

    for packet in candidates:
        if not packet:
            continue
        if isinstance(packet, bytes | bytearray):
            return bytes(packet).decode("utf-8", errors="ignore")
        if isinstance(packet, str):
            return packet
    return None


def _container_items(container: ET.Element, namespace: str) -> list[MetadataTag]:
    items = []
    for li in container.findall(f"{{{RDF_NS}}}li"):
        items.append(_element_to_tag(li, "", namespace))
    return items


def _element_to_tag(elem: ET.Element, name: str, namespace: str) -> MetadataTag:
    for kind in _CONTAINERS:
        container = elem.find(f"{{{RDF_NS}}}{kind}")
        if container is not None:
            return MetadataTag(
                name=name,
                namespace=namespace,
                value=_container_items(container, namespace),
                type="array",
            )

    nested = elem.find(f"{{{RDF_NS}}}Description")
    if nested is not None or elem.get(f"{{{RDF_NS}}}parseType") == "Resource":
        fields = _description_tags(nested if nested is not None else elem)
        return MetadataTag(name=name, namespace=namespace, value=fields, type="structure")

    return MetadataTag(name=name, namespace=namespace, value=(elem.text or "").strip())


def _description_tags(desc: ET.Element) -> list[MetadataTag]:
    tags = []
    for key, value in desc.attrib.items():
        namespace, local = _split_name(key)
        if namespace == RDF_NS or not namespace:
            continue
        tags.append(MetadataTag(name=local, namespace=namespace, value=value))

    for child in desc:
        namespace, local = _split_name(child.tag)
        if namespace == RDF_NS:
            continue
        tags.append(_element_to_tag(child, local, namespace))
    return tags


def parse_xmp_tags(packet: str) -> list[MetadataTag]:
    """Parse an XMP packet into its top-level tags, in document order.

    Raises:
        xml.etree.ElementTree.ParseError: If the packet is not well-formed
    """
    match = _XMPMETA_RE.search(packet) or _RDF_RE.search(packet)
    body = match.group(0) if match else packet.strip().strip("\x00")

    # Wrap so a packet that relies on an outer x: declaration still parses
    root = ET.fromstring(
        f'<root xmlns:x="adobe:ns:meta/" xmlns:rdf="{RDF_NS}">{body}</root>'
    )

    tags: list[MetadataTag] = []
    # Only direct children of rdf:RDF; nested descriptions are structure values
    for rdf in root.iter(f"{{{RDF_NS}}}RDF"):
        for desc in rdf.findall(f"{{{RDF_NS}}}Description"):
            tags.extend(_description_tags(desc))
    return tags
