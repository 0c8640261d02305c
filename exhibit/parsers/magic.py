"""
Content Signature Identification
================================

Identifies a file by its leading bytes.  The description is recorded on
every :class:`~exhibit.core.models.AnalysisResult` so an examiner can
compare what a file *claims* to be (MIME type, extension) with what its
content says it is.  When content sniffing is enabled, the matching
parser route is also used as a last-resort dispatch hint.

References:
    - Gary Kessler's File Signatures Table.
      https://www.garykessler.net/library/file_sigs.html
    - ``file(1)`` command magic database. https://github.com/file/file
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from exhibit.core.models import FileType


@dataclass(frozen=True, slots=True)
class _Signature:
    """A single magic signature entry.

    Attributes:
        magic: Byte pattern to match.
        offset: Byte offset where *magic* is expected.
        description: Human-readable type description.
        route: Parser route for this content, if one exists.
    """
    magic: bytes
    offset: int
    description: str
    route: Optional[FileType] = None


# Ordered by specificity: longer / rarer matches first.
_SIGNATURES: tuple[_Signature, ...] = (
    # ── Images ──────────────────────────────────────────────────────────
    _Signature(b"\x89PNG\r\n\x1a\n", 0, "PNG image", FileType.PNG),
    _Signature(b"\xff\xd8\xff\xe0", 0, "JPEG image (JFIF)", FileType.IMAGE),
    _Signature(b"\xff\xd8\xff\xe1", 0, "JPEG image (Exif)", FileType.IMAGE),
    _Signature(b"\xff\xd8\xff\xee", 0, "JPEG image (Adobe)", FileType.IMAGE),
    _Signature(b"\xff\xd8\xff", 0, "JPEG image", FileType.IMAGE),
    _Signature(b"GIF87a", 0, "GIF image (87a)"),
    _Signature(b"GIF89a", 0, "GIF image (89a)"),
    _Signature(b"II\x2a\x00", 0, "TIFF image (little-endian)"),
    _Signature(b"MM\x00\x2a", 0, "TIFF image (big-endian)"),
    _Signature(b"BM", 0, "BMP image"),

    # ── Documents ───────────────────────────────────────────────────────
    _Signature(b"%PDF", 0, "PDF document", FileType.PDF),
    _Signature(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", 0, "MS Office (OLE2 Compound)"),
    _Signature(b"{\\rtf", 0, "RTF document"),

    # ── Archives ────────────────────────────────────────────────────────
    _Signature(b"7z\xbc\xaf\x27\x1c", 0, "7-Zip archive"),
    _Signature(b"Rar!\x1a\x07\x01\x00", 0, "RAR5 archive"),
    _Signature(b"Rar!\x1a\x07\x00", 0, "RAR archive"),
    _Signature(b"\x1f\x8b", 0, "GZIP compressed"),
    _Signature(b"ustar\x0000", 257, "POSIX TAR archive"),

    # ── Executables ─────────────────────────────────────────────────────
    _Signature(b"\x7fELF", 0, "ELF executable"),
    _Signature(b"MZ", 0, "PE/MS-DOS executable"),

    # ── Text-ish ────────────────────────────────────────────────────────
    _Signature(b"<?xml", 0, "XML document"),
    _Signature(b"#!", 0, "Script (shebang)"),
)

_ZIP_MAGIC = b"PK\x03\x04"
_TEXT_BYTES = frozenset(range(0x20, 0x7F)) | {0x09, 0x0A, 0x0D}


class MagicIdentifier:
    """Identify file content by magic byte signatures.

    Usage::

        identifier = MagicIdentifier()
        identifier.identify(data)        # "PDF document"
        identifier.route(data)           # FileType.PDF
    """

    def identify(self, data: bytes) -> str:
        """Return a human-readable description of *data*'s content type."""
        if not data:
            return "Empty file"

        sig = self._match(data)
        if sig is not None:
            return sig.description

        if data[:4] == _ZIP_MAGIC:
            return self._check_ooxml(data)[0]

        if self._looks_like_text(data[:4096]):
            return "Text file"
        return "Unknown binary"

    def route(self, data: bytes) -> Optional[FileType]:
        """Parser route implied by the content, or ``None``."""
        if not data:
            return None
        sig = self._match(data)
        if sig is not None:
            return sig.route
        if data[:4] == _ZIP_MAGIC:
            return self._check_ooxml(data)[1]
        return None

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _match(data: bytes) -> Optional[_Signature]:
        data_len = len(data)
        for sig in _SIGNATURES:
            end = sig.offset + len(sig.magic)
            if end <= data_len and data[sig.offset:end] == sig.magic:
                return sig
        return None

    @staticmethod
    def _check_ooxml(data: bytes) -> tuple[str, Optional[FileType]]:
        """Sub-classify a ZIP by the entry names near its start."""
        window = data[:4096]
        if b"[Content_Types].xml" in window or b"docProps/" in window:
            if b"word/" in window:
                return "Microsoft Word (OOXML .docx)", FileType.DOCX
            if b"xl/" in window:
                return "Microsoft Excel (OOXML .xlsx)", None
            if b"ppt/" in window:
                return "Microsoft PowerPoint (OOXML .pptx)", None
            return "OOXML document", None
        if b"mimetype" in window and b"application/vnd.oasis.opendocument" in window:
            return "ODF document", None
        return "ZIP archive", None

    @staticmethod
    def _looks_like_text(data: bytes) -> bool:
        """True if fewer than 5% of bytes fall outside printable ASCII."""
        if not data:
            return False
        non_text = sum(1 for b in data if b not in _TEXT_BYTES)
        return non_text / len(data) < 0.05
