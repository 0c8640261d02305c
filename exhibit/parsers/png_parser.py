"""
PNG Structural Parser
=====================

Walks the PNG chunk stream and records every chunk header in on-disk
order.

Chunk layout (all integers big-endian)::

    +--------+--------+-----------------+-------+
    | length | type   | data            | CRC   |
    | 4 B    | 4 B    | length B        | 4 B   |
    +--------+--------+-----------------+-------+

The walk starts after the 8-byte file signature and stops as soon as
fewer than 8 bytes remain, so a truncated tail is tolerated without a
warning.  CRCs are not verified.  Tag metadata (eXIf / iTXt XMP) is
decoded through :class:`~exhibit.parsers.image_parser.ImageParser`.

References:
    - W3C (2003). Portable Network Graphics (PNG) Specification, 2nd ed.
"""

from __future__ import annotations

import struct
from typing import Optional

from shared.logger import ExhibitLogger

from exhibit.core.models import (
    ImageMetadata,
    ParseResult,
    PngMetadata,
    RawFile,
    StructuralChunk,
)
from exhibit.parsers.image_parser import ImageParser

PNG_MAGIC: bytes = b"\x89PNG"
PNG_SIGNATURE_SIZE: int = 8
_CHUNK_HEADER = struct.Struct(">I4s")

WARN_BAD_SIGNATURE = "Invalid PNG signature"


def walk_chunks(data: bytes) -> list[StructuralChunk]:
    """Return the header of every chunk from offset 8 onwards.

    Each step advances by ``4 + 4 + length + 4`` bytes, so the walk
    always terminates.
    """
    chunks: list[StructuralChunk] = []
    offset = PNG_SIGNATURE_SIZE
    data_len = len(data)

    while offset + _CHUNK_HEADER.size <= data_len:
        length, raw_type = _CHUNK_HEADER.unpack_from(data, offset)
        chunks.append(StructuralChunk(
            name=raw_type.decode("latin-1"),
            size=length,
            offset=offset,
        ))
        offset += 4 + 4 + length + 4

    return chunks


class PngParser:
    """Record PNG chunk layout and merge in image tag metadata.

    Args:
        image_parser: Parser used for EXIF / XMP decoding and anomaly rules.
        logger: Optional logger.
    """

    def __init__(
        self,
        image_parser: Optional[ImageParser] = None,
        logger: Optional[ExhibitLogger] = None,
    ) -> None:
        self._logger = logger or ExhibitLogger.quiet("parser.png")
        self._image_parser = image_parser or ImageParser(logger=self._logger)

    def parse(self, raw: RawFile) -> ParseResult:
        data = raw.data
        warnings: list[str] = []

        if data[:4] != PNG_MAGIC:
            warnings.append(WARN_BAD_SIGNATURE)

        chunks = walk_chunks(data)
        if chunks and chunks[-1].name != "IEND":
            self._logger.debug(
                "Chunk stream does not end with IEND",
                last_chunk=chunks[-1].name,
                chunk_count=len(chunks),
            )

        tags = self._image_parser.read_tags(data, warnings)
        warnings.extend(self._image_parser.check_tags(tags))

        return ParseResult(
            metadata=PngMetadata(
                image=ImageMetadata.from_tags(tags),
                chunks=tuple(chunks),
            ),
            warnings=tuple(warnings),
        )
