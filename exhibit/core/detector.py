"""
Format Detection and Dispatch
=============================

Chooses exactly one parser for a file.  Hints are consulted in fixed
priority order:

1. Declared MIME type, checked against every route.
2. File-name extension, checked against every route.
3. Leading magic bytes (only when content sniffing is enabled).
4. Otherwise the generic fallback.

Routes are always tried in the order JPEG, PNG, PDF, DOCX.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional, Protocol

from exhibit.core.models import FileType, ParseResult, RawFile
from exhibit.parsers.docx_parser import DocxParser
from exhibit.parsers.generic_parser import GenericParser
from exhibit.parsers.image_parser import ImageParser
from exhibit.parsers.magic import MagicIdentifier
from exhibit.parsers.pdf_parser import PdfParser
from exhibit.parsers.png_parser import PngParser


class FormatParser(Protocol):
    def parse(self, raw: RawFile) -> ParseResult: ...


@dataclass(frozen=True, slots=True)
class _Route:
    file_type: FileType
    mime_types: frozenset[str]
    extensions: frozenset[str]


_ROUTES: tuple[_Route, ...] = (
    _Route(FileType.IMAGE, frozenset({"image/jpeg"}), frozenset({".jpg", ".jpeg"})),
    _Route(FileType.PNG, frozenset({"image/png"}), frozenset({".png"})),
    _Route(FileType.PDF, frozenset({"application/pdf"}), frozenset({".pdf"})),
    _Route(
        FileType.DOCX,
        frozenset({"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}),
        frozenset({".docx"}),
    ),
)


def _normalise_mime(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


class FormatDetector:
    """Route a :class:`RawFile` to its format parser.

    Usage::

        detector = FormatDetector()
        detector.detect("image/png", "evidence.dat")     # FileType.PNG
        result = detector.detect_and_parse(raw)

    Args:
        parsers: Parser per file type; missing entries use the defaults.
        sniff_content: Enable routing by magic bytes as a third tier.
        magic: Signature identifier used when sniffing.
    """

    def __init__(
        self,
        parsers: Optional[dict[FileType, FormatParser]] = None,
        *,
        sniff_content: bool = False,
        magic: Optional[MagicIdentifier] = None,
    ) -> None:
        defaults: dict[FileType, FormatParser] = {
            FileType.IMAGE: ImageParser(),
            FileType.PNG: PngParser(),
            FileType.PDF: PdfParser(),
            FileType.DOCX: DocxParser(),
            FileType.GENERIC: GenericParser(),
        }
        defaults.update(parsers or {})
        self._parsers = defaults
        self._sniff_content = sniff_content
        self._magic = magic or MagicIdentifier()

    def detect(
        self,
        mime_type: str = "",
        file_name: str = "",
        data: Optional[bytes] = None,
    ) -> FileType:
        """Return the route for the given hints.

        *data* is only consulted when content sniffing is enabled.
        """
        mime = _normalise_mime(mime_type or "")
        if mime:
            for route in _ROUTES:
                if mime in route.mime_types:
                    return route.file_type

        suffix = PurePath(file_name or "").suffix.lower()
        if suffix:
            for route in _ROUTES:
                if suffix in route.extensions:
                    return route.file_type

        if self._sniff_content and data:
            sniffed = self._magic.route(data)
            if sniffed is not None:
                return sniffed

        return FileType.GENERIC

    def parser_for(self, file_type: FileType) -> FormatParser:
        return self._parsers[file_type]

    def detect_and_parse(self, raw: RawFile) -> ParseResult:
        """Run exactly one parser, selected by :meth:`detect`."""
        file_type = self.detect(raw.mime_type, raw.file_name, raw.data)
        return self._parsers[file_type].parse(raw)
