"""
Exhibit error taxonomy.

Only two conditions are exceptional.  A format decoder that cannot make
sense of its input raises :class:`RecoverableParseError`, which the
owning parser turns into a warning.  Input that cannot be read at all
raises :class:`FatalIoError`, which ends the analysis of that one file.
Structural anomalies are never raised; they are reported as warnings.
"""

from __future__ import annotations

from typing import Any


class ExhibitError(Exception):
    """Base class for all Exhibit errors."""


class RecoverableParseError(ExhibitError):
    """A format decoder failed; analysis continues with what was recovered.

    Args:
        message: Human-readable reason.
        partial: Whatever the decoder extracted before failing, if anything.
    """

    def __init__(self, message: str, partial: Any = None) -> None:
        super().__init__(message)
        self.partial = partial


class FatalIoError(ExhibitError):
    """The input file could not be read or exceeds the configured size limit."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
