"""
Exhibit Data Models
===================

Pydantic models for the evidence an analysis produces: the immutable
input buffer, its digests, the structural chunk layout of chunked
formats, the per-format metadata trees, and the assembled
:class:`AnalysisResult`.

Result models are frozen.  Once an :class:`AnalysisResult` has been
assembled it is never modified; anything that needs a different view
builds a new object (see :mod:`exhibit.output.report`).

References:
    - CIPA DC-008-2019. Exchangeable image file format for digital
      still cameras: Exif Version 2.32.
    - ISO 16684-1:2019. Extensible metadata platform (XMP).
    - W3C (2003). Portable Network Graphics (PNG) Specification, 2nd ed.
    - ISO 32000-1:2008. Document management -- Portable document format.
    - ECMA-376 (2021). Office Open XML File Formats, Part 2: OPC.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class FileType(str, enum.Enum):
    """Parser route a file was dispatched to."""
    IMAGE = "IMAGE"
    PNG = "PNG"
    PDF = "PDF"
    DOCX = "DOCX"
    GENERIC = "GENERIC"


# Field names stay snake_case in Python; dumps with by_alias=True are camelCase.
_FROZEN = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class RawFile(BaseModel):
    """An uploaded or on-disk file held entirely in memory.

    Attributes:
        data: The file's bytes.  Every sub-analysis reads this buffer.
        mime_type: MIME type declared by the caller (may be empty).
        file_name: Original file name; only its extension is used for routing.
    """

    model_config = _FROZEN

    data: bytes = Field(repr=False)
    mime_type: str = ""
    file_name: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# Primitive evidence
# ---------------------------------------------------------------------------

class HashSet(BaseModel):
    """Lowercase hex digests of the complete file."""

    model_config = _FROZEN

    md5: str = Field(pattern=r"^[0-9a-f]{32}$")
    sha1: str = Field(pattern=r"^[0-9a-f]{40}$")
    sha256: str = Field(pattern=r"^[0-9a-f]{64}$")
    sha512: str = Field(pattern=r"^[0-9a-f]{128}$")


class StructuralChunk(BaseModel):
    """One on-disk chunk of a chunked container format.

    Attributes:
        name: Four-character chunk type, e.g. ``IHDR``.
        size: Declared payload length in bytes.
        offset: Absolute byte offset of the chunk's length field.
    """

    model_config = _FROZEN

    name: str
    size: int = Field(ge=0)
    offset: int = Field(ge=0)


class TagValue(BaseModel):
    """A decoded metadata tag: machine value plus printable description."""

    model_config = _FROZEN

    value: Any = None
    description: str = ""


TagMap = dict[str, TagValue]


class TagTree(BaseModel):
    """Namespaced tags decoded from an image: ``exif``, ``xmp`` and ``gps``."""

    exif: TagMap = Field(default_factory=dict)
    xmp: TagMap = Field(default_factory=dict)
    gps: TagMap = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Metadata trees (discriminated on file_type)
# ---------------------------------------------------------------------------

class ImageMetadata(BaseModel):
    """EXIF / XMP / GPS namespaces of a raster image; absent namespaces are ``None``."""

    model_config = _FROZEN

    file_type: Literal["IMAGE"] = "IMAGE"
    exif: Optional[TagMap] = None
    xmp: Optional[TagMap] = None
    gps: Optional[TagMap] = None

    @classmethod
    def from_tags(cls, tags: TagTree) -> ImageMetadata:
        return cls(
            exif=tags.exif or None,
            xmp=tags.xmp or None,
            gps=tags.gps or None,
        )


class PngMetadata(BaseModel):
    """PNG chunk layout merged with the image tag namespaces."""

    model_config = _FROZEN

    file_type: Literal["PNG"] = "PNG"
    image: ImageMetadata = Field(default_factory=ImageMetadata)
    chunks: tuple[StructuralChunk, ...] = ()


class PdfMetadata(BaseModel):
    """Document-information fields of a PDF.

    Every field is ``None`` when the document could not be parsed or the
    Info dictionary does not carry it.
    """

    model_config = _FROZEN

    file_type: Literal["PDF"] = "PDF"
    page_count: Optional[int] = None
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None


class DocxCoreProperties(BaseModel):
    """Fields of ``docProps/core.xml``, kept as the literal text found."""

    model_config = _FROZEN

    creator: Optional[str] = None
    last_modified_by: Optional[str] = None
    revision: Optional[str] = None
    created: Optional[str] = None
    modified: Optional[str] = None
    title: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None


class DocxAppProperties(BaseModel):
    """Fields of ``docProps/app.xml``, kept as the literal text found."""

    model_config = _FROZEN

    template: Optional[str] = None
    total_time: Optional[str] = None
    pages: Optional[str] = None
    words: Optional[str] = None
    application: Optional[str] = None
    company: Optional[str] = None
    doc_security: Optional[str] = None


class DocxMetadata(BaseModel):
    """Package properties of an OOXML word-processing document.

    Attributes:
        core: Core properties, or ``None`` if the part is absent or unreadable.
        app: Extended application properties, or ``None``.
        custom_present: Whether ``docProps/custom.xml`` was read.
    """

    model_config = _FROZEN

    file_type: Literal["DOCX"] = "DOCX"
    core: Optional[DocxCoreProperties] = None
    app: Optional[DocxAppProperties] = None
    custom_present: bool = False


class GenericMetadata(BaseModel):
    """Placeholder tree for formats without a structural parser."""

    model_config = _FROZEN

    file_type: Literal["GENERIC"] = "GENERIC"


MetadataTree = Annotated[
    Union[ImageMetadata, PngMetadata, PdfMetadata, DocxMetadata, GenericMetadata],
    Field(discriminator="file_type"),
]


# ---------------------------------------------------------------------------
# Parser and analysis output
# ---------------------------------------------------------------------------

class ParseResult(BaseModel):
    """What a single format parser produced.

    Attributes:
        metadata: Format-specific metadata tree.
        warnings: Anomalies and recoverable failures, in detection order.
        xml_dump: Raw metadata XML, when the format carries any.
    """

    model_config = _FROZEN

    metadata: MetadataTree
    warnings: tuple[str, ...] = ()
    xml_dump: Optional[str] = None

    @property
    def file_type(self) -> FileType:
        return FileType(self.metadata.file_type)

    @property
    def chunks(self) -> Optional[tuple[StructuralChunk, ...]]:
        if isinstance(self.metadata, PngMetadata):
            return self.metadata.chunks
        return None


class AnalysisResult(BaseModel):
    """Everything known about one file after analysis.

    Attributes:
        file_name: Name the file was submitted under.
        file_size: Size in bytes.
        mime_type: Declared MIME type.
        file_type: Parser route taken.
        signature: Content-based signature description (magic bytes).
        hashes: MD5 / SHA-1 / SHA-256 / SHA-512 digests.
        entropy: Whole-file Shannon entropy in bits per byte.
        metadata: Format-specific metadata tree.
        warnings: Parser warnings followed by heuristic warnings.
        chunks: PNG chunk layout, ``None`` for other formats.
        xml_dump: Raw metadata XML, if any.
        strings: Printable strings in buffer order.
        session_id: Caller-supplied session identifier.
        analysis_time: Caller-supplied analysis timestamp.
    """

    model_config = _FROZEN

    file_name: str
    file_size: int = Field(ge=0)
    mime_type: str = ""
    file_type: FileType
    signature: str = "Unknown"
    hashes: HashSet
    entropy: float = Field(ge=0.0, le=8.0)
    metadata: MetadataTree
    warnings: tuple[str, ...] = ()
    chunks: Optional[tuple[StructuralChunk, ...]] = None
    xml_dump: Optional[str] = None
    strings: tuple[str, ...] = Field(default=(), repr=False)
    session_id: Optional[str] = None
    analysis_time: Optional[datetime] = None


class AnalysisFailure(BaseModel):
    """Stand-in for a result when one file of a batch could not be analysed."""

    model_config = _FROZEN

    file_name: str
    error: str
    kind: Literal["io", "timeout", "error"] = "error"
