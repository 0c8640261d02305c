"""
Raster Image Metadata Parser
============================

Builds the ``IMAGE`` metadata tree from a decoded tag tree and applies
the image anomaly rules:

- A ``Software`` (EXIF) or ``CreatorTool`` (XMP) tag names the editing
  tool that last wrote the file.
- A capture timestamp (``DateTimeOriginal``) later than the file
  modification timestamp (``DateTime``) is temporally inconsistent.

Timestamps are compared after parsing.  Values that do not parse are not
compared and produce no warning.
"""

from __future__ import annotations

from typing import Optional

from shared.logger import ExhibitLogger

from exhibit.core.errors import RecoverableParseError
from exhibit.core.models import ImageMetadata, ParseResult, RawFile, TagTree
from exhibit.parsers.tags import TagDecoder, decode_image_tags
from exhibit.parsers.timestamps import follows

WARN_TAG_DECODE = "Could not read EXIF/XMP metadata: {error}"
WARN_SOFTWARE = "Editing software detected: {tool}"
WARN_TEMPORAL = (
    "Temporal inconsistency: capture date (DateTimeOriginal) is later "
    "than modification date (DateTime)"
)


class ImageParser:
    """Parse EXIF / XMP / GPS metadata of JPEG and other raster images.

    Args:
        tag_decoder: Callable turning image bytes into a :class:`TagTree`.
            Defaults to :func:`~exhibit.parsers.tags.decode_image_tags`.
        logger: Optional logger for recoverable failures.
    """

    def __init__(
        self,
        tag_decoder: TagDecoder = decode_image_tags,
        logger: Optional[ExhibitLogger] = None,
    ) -> None:
        self._decode = tag_decoder
        self._logger = logger or ExhibitLogger.quiet("parser.image")

    def parse(self, raw: RawFile) -> ParseResult:
        warnings: list[str] = []
        tags = self.read_tags(raw.data, warnings)
        warnings.extend(self.check_tags(tags))
        return ParseResult(
            metadata=ImageMetadata.from_tags(tags),
            warnings=tuple(warnings),
        )

    def read_tags(self, data: bytes, warnings: list[str]) -> TagTree:
        """Decode tags, recording a warning and keeping any partial tree on failure."""
        try:
            return self._decode(data)
        except RecoverableParseError as exc:
            self._logger.warning("Tag decoding failed: %s", exc)
            warnings.append(WARN_TAG_DECODE.format(error=exc))
            partial = exc.partial
            return partial if isinstance(partial, TagTree) else TagTree()

    def check_tags(self, tags: TagTree) -> list[str]:
        """Apply the tool-signature and temporal rules to *tags*."""
        warnings: list[str] = []

        tool = tags.exif.get("Software") or tags.xmp.get("CreatorTool")
        if tool is not None:
            warnings.append(WARN_SOFTWARE.format(tool=tool.description or tool.value))

        created = tags.exif.get("DateTimeOriginal")
        modified = tags.exif.get("DateTime")
        if created is not None and modified is not None:
            later = follows(created.description, modified.description)
            if later is None:
                self._logger.debug(
                    "Skipping temporal check, unparseable timestamps",
                    created=created.description,
                    modified=modified.description,
                )
            elif later:
                warnings.append(WARN_TEMPORAL)

        return warnings
