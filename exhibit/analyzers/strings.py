"""
Printable String Extractor
==========================

Extracts maximal runs of printable ASCII (0x20-0x7E plus tab, LF and CR)
from a byte buffer, in buffer order, the way ``strings(1)`` does.

Extracted strings can additionally be tagged with an indicator category
(URL, e-mail address, IP address, file path, script marker) for the
investigator-facing string view.

References:
    - Strings(1) Unix utility algorithm.
"""

from __future__ import annotations

import enum
import re


class StringCategory(str, enum.Enum):
    """Indicator categories for extracted strings."""
    URL = "url"
    EMAIL = "email"
    IP_ADDRESS = "ip_address"
    FILE_PATH = "file_path"
    SCRIPT = "script"
    GENERAL = "general"


# ---------------------------------------------------------------------------
# Classification regex patterns
# ---------------------------------------------------------------------------

_URL_PATTERN = re.compile(
    r"(?:https?|ftp)://[a-zA-Z0-9\-._~:/?#\[\]@!$&'()*+,;=%]{4,}",
    re.ASCII,
)

_EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}",
    re.ASCII,
)

_IPV4_PATTERN = re.compile(
    r"\b(?:(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\.){3}"
    r"(?:25[0-5]|2[0-4]\d|[01]?\d\d?)\b"
)

_PATH_PATTERN = re.compile(
    r"[A-Za-z]:\\(?:[a-zA-Z0-9._\- ]+\\)*[a-zA-Z0-9._\- ]+"
    r"|/(?:usr|etc|bin|var|tmp|home|Users|opt|Applications)(?:/[a-zA-Z0-9._\-]+)+",
    re.ASCII,
)

_SCRIPT_PATTERN = re.compile(
    r"/JavaScript|/JS\b|/OpenAction|/AA\b|/Launch|<script|eval\(",
    re.ASCII | re.IGNORECASE,
)


def _run_pattern(min_length: int) -> re.Pattern[bytes]:
    return re.compile(rb"[\x20-\x7e\t\n\r]{%d,}" % min_length)


def extract_printable_strings(data: bytes, min_length: int = 4) -> list[str]:
    """Return every maximal printable run of at least *min_length* bytes.

    A *min_length* below 1 is treated as 1.  Runs are returned exactly as
    found (no trimming, no deduplication) in the order they occur.

    Examples::

        >>> extract_printable_strings(b"AB\\x00CDEF\\x01GH", 2)
        ['AB', 'CDEF', 'GH']
        >>> extract_printable_strings(b"A\\x00BCDE")
        ['BCDE']
    """
    pattern = _run_pattern(max(1, min_length))
    return [m.group().decode("ascii") for m in pattern.finditer(data)]


def categorize_string(value: str) -> StringCategory:
    """Tag *value* with the first matching indicator category."""
    if _URL_PATTERN.search(value):
        return StringCategory.URL
    if _EMAIL_PATTERN.search(value):
        return StringCategory.EMAIL
    if _IPV4_PATTERN.search(value):
        return StringCategory.IP_ADDRESS
    if _SCRIPT_PATTERN.search(value):
        return StringCategory.SCRIPT
    if _PATH_PATTERN.search(value):
        return StringCategory.FILE_PATH
    return StringCategory.GENERAL


class StringExtractor:
    """Extractor bound to a minimum run length.

    Usage::

        extractor = StringExtractor(min_length=6)
        strings = extractor.extract(data)
    """

    def __init__(self, min_length: int = 4) -> None:
        self._min_length: int = max(1, min_length)

    @property
    def min_length(self) -> int:
        return self._min_length

    def extract(self, data: bytes) -> list[str]:
        return extract_printable_strings(data, self._min_length)
