"""
Tests for the Rich console rendering of analysis results.
"""

import pytest

from shared.console import ExhibitConsole
from exhibit.core.models import AnalysisFailure
from exhibit.output.console import ExhibitConsoleOutput


@pytest.fixture
def recording_console():
    """Console that records everything it prints.

    Returns:
        An :class:`ExhibitConsole` with recording enabled.
    """
    return ExhibitConsole(record=True)


def _rendered(console):
    return console.export_text()


def test_docx_sections(engine, make_docx, recording_console):
    result = engine.analyze_bytes(make_docx(), file_name="memo.docx")
    ExhibitConsoleOutput(recording_console, show_xml=True).display(result)

    text = _rendered(recording_console)
    assert "File Identity" in text
    assert "Core Properties" in text
    assert "Application Properties" in text
    assert "Raw Metadata XML" in text
    assert "Temporal inconsistency" in text


def test_png_chunk_table(engine, make_png, recording_console):
    result = engine.analyze_bytes(make_png(), file_name="scan.png")
    ExhibitConsoleOutput(recording_console).display(result)

    text = _rendered(recording_console)
    assert "PNG Chunks" in text
    assert "IEND" in text


def test_string_sample_limited(engine, recording_console):
    data = b"\x00".join(b"string-%03d" % i for i in range(20))
    result = engine.analyze_bytes(data, file_name="blob.bin")
    ExhibitConsoleOutput(recording_console, max_strings=5).display(result)

    assert "Strings (5 of 20)" in _rendered(recording_console)


def test_failure_line(recording_console):
    failure = AnalysisFailure(file_name="gone.bin", error="No such file", kind="io")
    ExhibitConsoleOutput(recording_console).display_failure(failure)

    assert "gone.bin: No such file (io)" in _rendered(recording_console)
