"""
Exhibit Format Parsers
======================

One parser per supported container format, plus the capability
adapters they delegate decoding to (``exifread``, ``pypdf``,
``zipfile``).
"""

from exhibit.parsers.docx_parser import DocxParser
from exhibit.parsers.generic_parser import GenericParser
from exhibit.parsers.image_parser import ImageParser
from exhibit.parsers.magic import MagicIdentifier
from exhibit.parsers.pdf_parser import PdfParser
from exhibit.parsers.png_parser import PngParser

__all__ = [
    "DocxParser",
    "GenericParser",
    "ImageParser",
    "MagicIdentifier",
    "PdfParser",
    "PngParser",
]
