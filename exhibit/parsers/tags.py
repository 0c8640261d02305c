"""
Image Tag Decoding
==================

Decodes the EXIF, GPS and XMP metadata embedded in a raster image into a
namespaced :class:`~exhibit.core.models.TagTree`.

EXIF and GPS IFDs are read with ``exifread``; its ``"<IFD> <Tag>"`` keys
are split so that ``Image``/``EXIF``/``Interoperability`` tags land in the
``exif`` namespace and ``GPS`` tags in ``gps``.  XMP is located as the
``<x:xmpmeta>`` packet inside the file and flattened from its
``rdf:Description`` properties.

The module exposes the decoding capability as a single function,
:func:`decode_image_tags`, so parsers can take any callable with the same
contract.

References:
    - CIPA DC-008-2019. Exif Version 2.32.
    - ISO 16684-1:2019. Extensible metadata platform (XMP).
"""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET
from fractions import Fraction
from typing import Any, Callable

import exifread

from exhibit.core.errors import RecoverableParseError
from exhibit.core.models import TagTree, TagValue

TagDecoder = Callable[[bytes], TagTree]

_EXIF_IFDS = frozenset({"Image", "EXIF", "Interoperability"})
_GPS_IFD = "GPS"

_XMP_START = b"<x:xmpmeta"
_XMP_END = b"</x:xmpmeta>"
_RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
_RDF_CONTAINERS = frozenset({"Alt", "Seq", "Bag"})


# ---------------------------------------------------------------------------
# EXIF / GPS
# ---------------------------------------------------------------------------

def _plain(value: Any) -> Any:
    """Convert exifread value types into JSON-friendly Python values."""
    if isinstance(value, Fraction):
        return float(value) if value.denominator else None
    if isinstance(value, bytes):
        return value.decode("latin-1").rstrip("\x00")
    if isinstance(value, str):
        return value.rstrip("\x00").strip()
    if isinstance(value, (list, tuple)):
        items = [_plain(v) for v in value]
        return items[0] if len(items) == 1 else items
    return value


def _read_exif(data: bytes, tree: TagTree) -> None:
    tags = exifread.process_file(
        io.BytesIO(data), details=False, extract_thumbnail=False
    )
    for key, tag in tags.items():
        ifd, _, name = key.partition(" ")
        if not name:
            continue
        if ifd in _EXIF_IFDS:
            namespace = tree.exif
        elif ifd == _GPS_IFD:
            namespace = tree.gps
        else:
            # Thumbnail and MakerNote IFDs
            continue
        if name in namespace:
            continue
        namespace[name] = TagValue(
            value=_plain(getattr(tag, "values", None)),
            description=str(getattr(tag, "printable", tag)).strip(),
        )


# ---------------------------------------------------------------------------
# XMP
# ---------------------------------------------------------------------------

def find_xmp_packet(data: bytes) -> bytes | None:
    """Return the raw ``<x:xmpmeta>...</x:xmpmeta>`` packet, if present."""
    start = data.find(_XMP_START)
    if start < 0:
        return None
    end = data.find(_XMP_END, start)
    if end < 0:
        return None
    return data[start:end + len(_XMP_END)]


def _local(tag: str) -> str:
    return tag.split("}")[-1]


def _property_text(elem: ET.Element) -> str:
    for container in elem:
        if container.tag in {f"{{{_RDF_NS}}}{c}" for c in _RDF_CONTAINERS}:
            items = [
                (li.text or "").strip()
                for li in container
                if li.tag == f"{{{_RDF_NS}}}li"
            ]
            return ", ".join(item for item in items if item)
    return (elem.text or "").strip()


def _read_xmp(data: bytes, tree: TagTree) -> None:
    packet = find_xmp_packet(data)
    if packet is None:
        return
    root = ET.fromstring(packet)
    for desc in root.iter(f"{{{_RDF_NS}}}Description"):
        for attr, value in desc.attrib.items():
            if attr.startswith(f"{{{_RDF_NS}}}"):
                continue
            tree.xmp.setdefault(_local(attr), TagValue(value=value, description=value))
        for prop in desc:
            text = _property_text(prop)
            tree.xmp.setdefault(_local(prop.tag), TagValue(value=text, description=text))


# ---------------------------------------------------------------------------
# Capability entry point
# ---------------------------------------------------------------------------

def decode_image_tags(data: bytes) -> TagTree:
    """Decode EXIF, GPS and XMP tags from an image buffer.

    Both decoders always run.  If either fails, a
    :class:`RecoverableParseError` is raised whose ``partial`` attribute
    holds whatever tags were decoded.

    Raises:
        RecoverableParseError: When the EXIF or XMP payload is malformed.
    """
    tree = TagTree()
    failures: list[str] = []

    try:
        _read_exif(data, tree)
    except Exception as exc:
        failures.append(f"EXIF: {exc}")

    try:
        _read_xmp(data, tree)
    except (ET.ParseError, UnicodeDecodeError, ValueError) as exc:
        failures.append(f"XMP: {exc}")

    if failures:
        raise RecoverableParseError("; ".join(failures), partial=tree)
    return tree
