"""
PDF Document-Information Parser
===============================

Extracts the document-information fields of a PDF (page count, title,
author, subject, keywords, creator, producer, creation and modification
dates) through ``pypdf``, plus the raw XMP metadata stream when the
catalog carries one.

Script and automatic-action detection is a substring heuristic over the
printable strings of the whole file and runs whether or not the document
itself could be parsed:

- ``/JavaScript`` or ``/JS``  -> embedded JavaScript
- ``/OpenAction`` or ``/AA``  -> automatic action on open / on event

It does not walk the object graph, so actions hidden in compressed
object streams are missed and literal text containing these names is
flagged.

References:
    - ISO 32000-1:2008, section 14.3 (Metadata) and 12.6 (Actions).
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from pypdf import PdfReader
from pypdf import PasswordType

from shared.logger import ExhibitLogger

from exhibit.analyzers.strings import extract_printable_strings
from exhibit.core.errors import RecoverableParseError
from exhibit.core.models import ParseResult, PdfMetadata, RawFile
from exhibit.parsers.timestamps import follows

WARN_PARSE = "Could not parse PDF: {error}"
WARN_XMP = "Could not read PDF XMP metadata: {error}"
WARN_JAVASCRIPT = "Embedded JavaScript detected (potentially malicious)"
WARN_AUTO_ACTION = "Automatic actions detected (/OpenAction or /AA)"
WARN_TEMPORAL = (
    "Temporal inconsistency: creation date is later than modification date"
)

_JS_MARKERS: tuple[str, ...] = ("/JavaScript", "/JS")
_ACTION_MARKERS: tuple[str, ...] = ("/OpenAction", "/AA")


@dataclass(slots=True)
class PdfDocumentInfo:
    """What the document reader capability returns."""

    page_count: Optional[int] = None
    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
    xmp: Optional[str] = None
    xmp_error: Optional[str] = None


DocumentReader = Callable[[bytes], PdfDocumentInfo]


# ---------------------------------------------------------------------------
# pypdf adapter
# ---------------------------------------------------------------------------

def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _date(info: Any, attr: str) -> Optional[datetime]:
    try:
        return getattr(info, attr)
    except ValueError:
        # malformed date string in the Info dictionary
        return None


def _raw_xmp(reader: PdfReader) -> Optional[str]:
    root = reader.trailer["/Root"].get_object()
    stream = root.get("/Metadata")
    if stream is None:
        return None
    return stream.get_object().get_data().decode("utf-8", errors="replace")


def read_pdf_info(data: bytes) -> PdfDocumentInfo:
    """Read document-information fields with :class:`pypdf.PdfReader`.

    Encrypted documents are opened with the empty user password.  A
    failure reading the XMP stream is recorded in ``xmp_error`` and leaves
    the other fields intact.

    Raises:
        RecoverableParseError: When the document cannot be parsed.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted and reader.decrypt("") == PasswordType.NOT_DECRYPTED:
            raise RecoverableParseError("document is encrypted with a user password")

        info = reader.metadata
        result = PdfDocumentInfo(page_count=len(reader.pages))
        if info is not None:
            result.title = _text(info.title)
            result.author = _text(info.author)
            result.subject = _text(info.subject)
            result.keywords = _text(info.get("/Keywords"))
            result.creator = _text(info.creator)
            result.producer = _text(info.producer)
            result.creation_date = _date(info, "creation_date")
            result.modification_date = _date(info, "modification_date")
        try:
            result.xmp = _raw_xmp(reader)
        except Exception as exc:
            # a broken /Metadata stream does not invalidate the Info fields
            result.xmp_error = str(exc) or type(exc).__name__
        return result
    except RecoverableParseError:
        raise
    except Exception as exc:
        raise RecoverableParseError(str(exc) or type(exc).__name__) from exc


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def script_warnings(data: bytes) -> list[str]:
    """Apply the JavaScript / automatic-action substring heuristics."""
    strings = extract_printable_strings(data)
    warnings: list[str] = []
    if any(marker in s for s in strings for marker in _JS_MARKERS):
        warnings.append(WARN_JAVASCRIPT)
    if any(marker in s for s in strings for marker in _ACTION_MARKERS):
        warnings.append(WARN_AUTO_ACTION)
    return warnings


class PdfParser:
    """Parse PDF document information and flag script indicators.

    Args:
        document_reader: Callable returning :class:`PdfDocumentInfo` for a
            buffer.  Defaults to the ``pypdf`` adapter :func:`read_pdf_info`.
        logger: Optional logger.
    """

    def __init__(
        self,
        document_reader: DocumentReader = read_pdf_info,
        logger: Optional[ExhibitLogger] = None,
    ) -> None:
        self._read = document_reader
        self._logger = logger or ExhibitLogger.quiet("parser.pdf")

    def parse(self, raw: RawFile) -> ParseResult:
        warnings: list[str] = []
        metadata = PdfMetadata()
        xml_dump: Optional[str] = None

        try:
            info = self._read(raw.data)
        except RecoverableParseError as exc:
            self._logger.warning("PDF parse failed: %s", exc)
            warnings.append(WARN_PARSE.format(error=exc))
        else:
            metadata = PdfMetadata(
                page_count=info.page_count,
                title=info.title,
                author=info.author,
                subject=info.subject,
                keywords=info.keywords,
                creator=info.creator,
                producer=info.producer,
                creation_date=info.creation_date,
                modification_date=info.modification_date,
            )
            xml_dump = info.xmp
            if follows(info.creation_date, info.modification_date):
                warnings.append(WARN_TEMPORAL)
            if info.xmp_error is not None:
                self._logger.warning("PDF XMP read failed: %s", info.xmp_error)
                warnings.append(WARN_XMP.format(error=info.xmp_error))

        warnings.extend(script_warnings(raw.data))

        return ParseResult(metadata=metadata, warnings=tuple(warnings), xml_dump=xml_dump)
