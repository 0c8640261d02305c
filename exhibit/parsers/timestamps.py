"""
Timestamp normalisation for temporal-consistency checks.

Metadata timestamps arrive in several textual shapes: EXIF's
``YYYY:MM:DD HH:MM:SS``, W3C-DTF / ISO 8601 from OOXML and XMP, and
``datetime`` objects from the PDF reader.  They are compared only after
conversion to aware UTC datetimes; anything that does not parse is
reported as ``None`` and the comparison is skipped.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional, Union

_EXIF_PATTERN = re.compile(
    r"^(\d{4}):(\d{2}):(\d{2})[ T](\d{2}):(\d{2}):(\d{2})"
)
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _normalise_fraction(text: str) -> str:
    # fromisoformat before 3.11 only accepts 3 or 6 fractional digits
    return _FRACTION_PATTERN.sub(
        lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1
    )


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an EXIF or ISO 8601 timestamp into an aware UTC datetime.

    Returns ``None`` for empty or unrecognised input.  Naive timestamps
    are taken to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)

    text = value.strip().strip("\x00")
    if not text:
        return None

    match = _EXIF_PATTERN.match(text)
    if match:
        try:
            return datetime(*(int(part) for part in match.groups()), tzinfo=timezone.utc)
        except ValueError:
            return None

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(_normalise_fraction(text)))
    except ValueError:
        return None


def follows(
    first: Union[str, datetime, None], second: Union[str, datetime, None]
) -> Optional[bool]:
    """Whether timestamp *first* falls strictly after *second*.

    Returns ``None`` when either side cannot be parsed.
    """
    a = parse_timestamp(first)
    b = parse_timestamp(second)
    if a is None or b is None:
        return None
    return a > b
