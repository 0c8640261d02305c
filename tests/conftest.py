"""
Shared fixtures for the Exhibit test suite.

Builders produce small but structurally valid evidence files in memory
so that every test is hermetic.
"""

import io
import struct
import zipfile
import zlib
from typing import Callable, Optional

import pytest

from shared.config import ExhibitConfig
from shared.logger import ExhibitLogger
from exhibit.core.engine import ExhibitEngine
from exhibit.core.models import TagTree

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

CORE_XML_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<cp:coreProperties '
    'xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
    "{body}"
    "</cp:coreProperties>"
)

APP_XML_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Properties '
    'xmlns="http://schemas.openxmlformats.org/officeDocument/2006/extended-properties" '
    'xmlns:vt="http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes">'
    "{body}"
    "</Properties>"
)


def png_chunk(chunk_type: bytes, payload: bytes = b"") -> bytes:
    """Encode one PNG chunk with a correct CRC."""
    crc = zlib.crc32(chunk_type + payload) & 0xFFFFFFFF
    return struct.pack(">I", len(payload)) + chunk_type + payload + struct.pack(">I", crc)


def core_xml(
    creator: str = "A",
    created: str = "2020-01-02",
    modified: str = "2020-01-01",
    extra: str = "",
) -> str:
    body = (
        f"<dc:creator>{creator}</dc:creator>"
        "<cp:lastModifiedBy>B</cp:lastModifiedBy>"
        "<cp:revision>3</cp:revision>"
        f'<dcterms:created xsi:type="dcterms:W3CDTF">{created}</dcterms:created>'
        f'<dcterms:modified xsi:type="dcterms:W3CDTF">{modified}</dcterms:modified>'
        f"{extra}"
    )
    return CORE_XML_TEMPLATE.format(body=body)


def app_xml(application: str = "Microsoft Office Word", pages: str = "2") -> str:
    body = (
        "<Template>Normal.dotm</Template>"
        "<TotalTime>12</TotalTime>"
        f"<Pages>{pages}</Pages>"
        "<Words>345</Words>"
        f"<Application>{application}</Application>"
        "<DocSecurity>0</DocSecurity>"
        "<Company>Acme</Company>"
    )
    return APP_XML_TEMPLATE.format(body=body)


def corrupt_member(data: bytes, name: str, length: int = 20) -> bytes:
    """Overwrite the start of member *name*'s compressed stream with 0xFF.

    The central directory stays intact, so the archive still opens and
    only reading that member fails.
    """
    info = zipfile.ZipFile(io.BytesIO(data)).getinfo(name)
    name_len, extra_len = struct.unpack_from("<HH", data, info.header_offset + 26)
    start = info.header_offset + 30 + name_len + extra_len
    length = min(length, info.compress_size)
    return data[:start] + b"\xff" * length + data[start + length:]


@pytest.fixture
def quiet_logger() -> ExhibitLogger:
    return ExhibitLogger.quiet("test")


@pytest.fixture
def config() -> ExhibitConfig:
    return ExhibitConfig()


@pytest.fixture
def engine(config: ExhibitConfig, quiet_logger: ExhibitLogger) -> ExhibitEngine:
    return ExhibitEngine(config=config, logger=quiet_logger)


@pytest.fixture
def empty_tags() -> Callable[[bytes], TagTree]:
    """Tag decoder stub that finds nothing."""
    return lambda data: TagTree()


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    def _make(*chunks: bytes, signature: bytes = PNG_SIGNATURE) -> bytes:
        if not chunks:
            ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 0, 0, 0, 0)
            chunks = (
                png_chunk(b"IHDR", ihdr),
                png_chunk(b"IDAT", zlib.compress(b"\x00\x00")),
                png_chunk(b"IEND"),
            )
        return signature + b"".join(chunks)

    return _make


@pytest.fixture
def make_docx() -> Callable[..., bytes]:
    def _make(parts: Optional[dict[str, str]] = None) -> bytes:
        if parts is None:
            parts = {"docProps/core.xml": core_xml(), "docProps/app.xml": app_xml()}
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("[Content_Types].xml", "<Types/>")
            zf.writestr("word/document.xml", "<w:document/>")
            for name, text in parts.items():
                zf.writestr(name, text)
        return buf.getvalue()

    return _make


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    from pypdf import PdfWriter

    def _make(metadata: Optional[dict[str, str]] = None, javascript: Optional[str] = None) -> bytes:
        writer = PdfWriter()
        writer.add_blank_page(width=72, height=72)
        if metadata:
            writer.add_metadata(metadata)
        if javascript:
            writer.add_js(javascript)
        buf = io.BytesIO()
        writer.write(buf)
        return buf.getvalue()

    return _make
