"""
OOXML Word-Processing Package Parser
====================================

Opens a ``.docx`` as an OPC (ZIP) package and reads its property parts:

- ``docProps/core.xml``   -- Dublin Core / core properties
- ``docProps/app.xml``    -- extended application properties
- ``docProps/custom.xml`` -- custom properties (raw dump only)

Every part that is present is appended, path-labelled, to the raw XML
dump *before* it is parsed, so a malformed part still reaches the
examiner.  A failure in one part is reported as a warning and does not
prevent the remaining parts from being read.

References:
    - ECMA-376 (2021). Office Open XML File Formats, Part 2: Open
      Packaging Conventions, section 11 (Core Properties).
"""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET
import zipfile
import zlib
from typing import Callable, Optional

from shared.logger import ExhibitLogger

from exhibit.core.errors import RecoverableParseError
from exhibit.core.models import (
    DocxAppProperties,
    DocxCoreProperties,
    DocxMetadata,
    ParseResult,
    RawFile,
)
from exhibit.parsers.timestamps import follows

CORE_PART = "docProps/core.xml"
APP_PART = "docProps/app.xml"
CUSTOM_PART = "docProps/custom.xml"

DEFAULT_MAX_PART_SIZE: int = 10_485_760  # 10 MiB

_NS: dict[str, str] = {
    "cp": "http://schemas.openxmlformats.org/package/2006/metadata/core-properties",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "ep": "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties",
}

_CORE_FIELDS: dict[str, str] = {
    "creator": "dc:creator",
    "last_modified_by": "cp:lastModifiedBy",
    "revision": "cp:revision",
    "created": "dcterms:created",
    "modified": "dcterms:modified",
    "title": "dc:title",
    "subject": "dc:subject",
    "description": "dc:description",
}

_APP_FIELDS: dict[str, str] = {
    "template": "ep:Template",
    "total_time": "ep:TotalTime",
    "pages": "ep:Pages",
    "words": "ep:Words",
    "application": "ep:Application",
    "company": "ep:Company",
    "doc_security": "ep:DocSecurity",
}

WARN_ARCHIVE = "Could not open DOCX package (ZIP): {error}"
WARN_PART = "Could not parse {part}: {error}"
WARN_PART_TOO_LARGE = "Skipped {part}: {size:,} bytes exceeds the {limit:,}-byte part limit"
WARN_TEMPORAL = "Temporal inconsistency: document created after it was last modified"


# ---------------------------------------------------------------------------
# zipfile adapter
# ---------------------------------------------------------------------------

class OoxmlPackage:
    """Read-only view of the parts inside an OPC package."""

    def __init__(self, archive: zipfile.ZipFile) -> None:
        self._archive = archive

    def part_size(self, name: str) -> Optional[int]:
        """Uncompressed size of part *name*, or ``None`` if it is absent."""
        try:
            return self._archive.getinfo(name).file_size
        except KeyError:
            return None

    def read_text(self, name: str) -> str:
        """Return part *name* decoded as UTF-8.

        Raises:
            RecoverableParseError: If the member cannot be decompressed.
        """
        try:
            payload = self._archive.read(name)
        except (
            zipfile.BadZipFile,
            zlib.error,
            EOFError,
            ValueError,
            RuntimeError,
            NotImplementedError,
            OSError,
        ) as exc:
            raise RecoverableParseError(str(exc)) from exc
        return payload.decode("utf-8", errors="replace")

    def close(self) -> None:
        self._archive.close()


PackageOpener = Callable[[bytes], OoxmlPackage]


def open_package(data: bytes) -> OoxmlPackage:
    """Open *data* as a ZIP package.

    Raises:
        RecoverableParseError: If *data* is not a readable ZIP archive.
    """
    try:
        return OoxmlPackage(zipfile.ZipFile(io.BytesIO(data)))
    except (zipfile.BadZipFile, EOFError, OSError, ValueError) as exc:
        raise RecoverableParseError(str(exc)) from exc


def _first_text(root: ET.Element, path: str) -> Optional[str]:
    elem = root.find(f".//{path}", _NS)
    if elem is None:
        return None
    return "".join(elem.itertext())


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class DocxParser:
    """Extract OOXML package properties and check their timestamps.

    Args:
        package_opener: Callable opening a buffer as an :class:`OoxmlPackage`.
        max_part_size: Largest uncompressed part that will be read.
        logger: Optional logger.
    """

    def __init__(
        self,
        package_opener: PackageOpener = open_package,
        max_part_size: int = DEFAULT_MAX_PART_SIZE,
        logger: Optional[ExhibitLogger] = None,
    ) -> None:
        self._open = package_opener
        self._max_part_size = max_part_size
        self._logger = logger or ExhibitLogger.quiet("parser.docx")

    def parse(self, raw: RawFile) -> ParseResult:
        warnings: list[str] = []
        dump: list[str] = []
        core: Optional[DocxCoreProperties] = None
        app: Optional[DocxAppProperties] = None
        custom_present = False

        try:
            package = self._open(raw.data)
        except RecoverableParseError as exc:
            self._logger.warning("Package open failed: %s", exc)
            warnings.append(WARN_ARCHIVE.format(error=exc))
            return ParseResult(metadata=DocxMetadata(), warnings=tuple(warnings))

        try:
            root = self._read_part(package, CORE_PART, dump, warnings)
            if root is not None:
                core = DocxCoreProperties(
                    **{field: _first_text(root, path) for field, path in _CORE_FIELDS.items()}
                )
                if core.created and core.modified:
                    later = follows(core.created, core.modified)
                    if later:
                        warnings.append(WARN_TEMPORAL)
                    elif later is None:
                        self._logger.debug(
                            "Skipping temporal check, unparseable timestamps",
                            created=core.created,
                            modified=core.modified,
                        )

            root = self._read_part(package, APP_PART, dump, warnings)
            if root is not None:
                app = DocxAppProperties(
                    **{field: _first_text(root, path) for field, path in _APP_FIELDS.items()}
                )

            custom_present = self._read_part(
                package, CUSTOM_PART, dump, warnings, parse=False
            ) is not None
        finally:
            package.close()

        return ParseResult(
            metadata=DocxMetadata(core=core, app=app, custom_present=custom_present),
            warnings=tuple(warnings),
            xml_dump="".join(dump) or None,
        )

    def _read_part(
        self,
        package: OoxmlPackage,
        part: str,
        dump: list[str],
        warnings: list[str],
        *,
        parse: bool = True,
    ) -> Optional[ET.Element]:
        """Dump and parse one part.

        Returns the parsed root element, or ``None`` if the part is absent,
        oversized or malformed.  With ``parse=False`` the part is only
        dumped and an empty element stands in for the root.
        """
        size = package.part_size(part)
        if size is None:
            return None
        if size > self._max_part_size:
            warnings.append(
                WARN_PART_TOO_LARGE.format(part=part, size=size, limit=self._max_part_size)
            )
            return None

        try:
            text = package.read_text(part)
        except RecoverableParseError as exc:
            self._logger.warning("Could not read %s: %s", part, exc)
            warnings.append(WARN_PART.format(part=part, error=exc))
            return None

        dump.append(f"--- {part} ---\n{text}\n\n")
        if not parse:
            return ET.Element(part)

        try:
            return ET.fromstring(text)
        except ET.ParseError as exc:
            self._logger.warning("Malformed XML in %s: %s", part, exc)
            warnings.append(WARN_PART.format(part=part, error=exc))
            return None
