"""Fallback for formats without a structural parser."""

from __future__ import annotations

from exhibit.core.models import GenericMetadata, ParseResult, RawFile


class GenericParser:
    """Return empty metadata and no warnings.

    The ``GENERIC`` file type itself is the "unsupported format" signal;
    hashes, entropy and strings are still produced by the engine.
    """

    def parse(self, raw: RawFile) -> ParseResult:
        return ParseResult(metadata=GenericMetadata())
