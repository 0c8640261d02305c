"""
Exhibit Console Output
======================

Rich terminal display for analysis results: identity panel, digests,
entropy gauge, warnings, the format-specific metadata tree, PNG chunk
layout, raw XML dump and a categorised string sample.

Uses :class:`~shared.console.ExhibitConsole` for consistent styling.
"""

from __future__ import annotations

from typing import Optional

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shared.console import ExhibitConsole

from exhibit.analyzers.entropy import classify_entropy
from exhibit.analyzers.strings import StringCategory, categorize_string
from exhibit.core.heuristics import HIGH_ENTROPY_THRESHOLD
from exhibit.core.models import (
    AnalysisFailure,
    AnalysisResult,
    DocxMetadata,
    ImageMetadata,
    PdfMetadata,
    PngMetadata,
    StructuralChunk,
    TagMap,
)


_ENTROPY_COLOUR_THRESHOLDS: list[tuple[float, str]] = [
    (1.0, "bright_green"),
    (4.5, "green"),
    (6.5, "yellow"),
    (7.0, "bright_yellow"),
    (HIGH_ENTROPY_THRESHOLD, "red"),
]

_STRING_CATEGORY_COLOURS: dict[StringCategory, str] = {
    StringCategory.URL: "bright_cyan",
    StringCategory.EMAIL: "bright_cyan",
    StringCategory.IP_ADDRESS: "bright_magenta",
    StringCategory.FILE_PATH: "bright_blue",
    StringCategory.SCRIPT: "bright_red",
    StringCategory.GENERAL: "dim",
}


def _entropy_colour(entropy: float) -> str:
    for threshold, colour in _ENTROPY_COLOUR_THRESHOLDS:
        if entropy <= threshold:
            return colour
    return "bright_red"


def _entropy_bar(entropy: float, width: int = 40) -> str:
    filled = int(min(entropy / 8.0, 1.0) * width)
    colour = _entropy_colour(entropy)
    return f"[{colour}]{'#' * filled}[/{colour}][dim]{'.' * (width - filled)}[/dim]"


def _tag_table(title: str, tags: TagMap) -> Table:
    tbl = Table(
        title=title,
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        show_lines=False,
        padding=(0, 1),
    )
    tbl.add_column("Tag", style="bold")
    tbl.add_column("Description")
    for name, tag in tags.items():
        tbl.add_row(escape(name), escape(tag.description))
    return tbl


def _fields_table(title: str, fields: dict[str, object]) -> Table:
    tbl = Table(
        title=title,
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        padding=(0, 1),
    )
    tbl.add_column("Field", style="bold")
    tbl.add_column("Value")
    for name, value in fields.items():
        shown = "[dim]-[/dim]" if value is None else escape(str(value))
        tbl.add_row(name, shown)
    return tbl


class ExhibitConsoleOutput:
    """Rich terminal display for :class:`AnalysisResult` objects.

    Usage::

        output = ExhibitConsoleOutput()
        output.display(result)
    """

    def __init__(
        self,
        console: Optional[ExhibitConsole] = None,
        max_strings: int = 50,
        show_xml: bool = False,
    ) -> None:
        self._console: ExhibitConsole = console or ExhibitConsole()
        self._max_strings = max_strings
        self._show_xml = show_xml

    def display(self, result: AnalysisResult) -> None:
        """Render every section for one result."""
        self._console.section(f"Evidence: {escape(result.file_name or '<memory>')}")
        self.display_identity(result)
        self.display_hashes(result)
        self.display_entropy(result.entropy)
        self.display_warnings(result.warnings)
        self.display_metadata(result)
        if result.chunks:
            self.display_chunks(result.chunks)
        if self._show_xml and result.xml_dump:
            self.display_xml(result.xml_dump)
        if result.strings and self._max_strings > 0:
            self.display_strings(result.strings)
        self._console.divider()

    def display_failure(self, failure: AnalysisFailure) -> None:
        self._console.error(
            f"{escape(failure.file_name)}: {escape(failure.error)} ({failure.kind})"
        )

    # ------------------------------------------------------------------ #
    #  Sections
    # ------------------------------------------------------------------ #

    def display_identity(self, result: AnalysisResult) -> None:
        lines = [
            f"[bold]File:[/bold]          {escape(result.file_name)}",
            f"[bold]Size:[/bold]          {result.file_size:,} bytes",
            f"[bold]Declared MIME:[/bold] {escape(result.mime_type) or '[dim]none[/dim]'}",
            f"[bold]Parser:[/bold]        {result.file_type.value}",
            f"[bold]Signature:[/bold]     {escape(result.signature)}",
        ]
        if result.session_id:
            lines.append(f"[bold]Session:[/bold]       {escape(result.session_id)}")
        if result.analysis_time:
            lines.append(f"[bold]Analysed:[/bold]      {result.analysis_time.isoformat()}")

        self._console.print(Panel(
            "\n".join(lines),
            title="[bold bright_cyan]File Identity[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        ))

    def display_hashes(self, result: AnalysisResult) -> None:
        hashes = result.hashes
        self._console.table(
            "Cryptographic Digests",
            ["Algorithm", "Digest"],
            [
                ("MD5", hashes.md5),
                ("SHA-1", hashes.sha1),
                ("SHA-256", hashes.sha256),
                ("SHA-512", hashes.sha512),
            ],
            styles=["bold", "exhibit.hash"],
        )

    def display_entropy(self, entropy: float) -> None:
        colour = _entropy_colour(entropy)
        self._console.print(Panel(
            f"[bold]Shannon entropy:[/bold] [{colour}]{entropy:.4f}[/{colour}] bits/byte"
            f"  ({classify_entropy(entropy)})\n  {_entropy_bar(entropy)}",
            title="[bold bright_cyan]Entropy[/bold bright_cyan]",
            border_style=colour,
            padding=(0, 2),
        ))

    def display_warnings(self, warnings: tuple[str, ...]) -> None:
        if not warnings:
            self._console.success("No anomalies detected")
            return
        for warning in warnings:
            self._console.warning(escape(warning))

    def display_metadata(self, result: AnalysisResult) -> None:
        meta = result.metadata
        if isinstance(meta, PngMetadata):
            self._display_image(meta.image)
        elif isinstance(meta, ImageMetadata):
            self._display_image(meta)
        elif isinstance(meta, PdfMetadata):
            self._console.print(_fields_table(
                "PDF Document Information",
                meta.model_dump(exclude={"file_type"}),
            ))
        elif isinstance(meta, DocxMetadata):
            if meta.core is not None:
                self._console.print(_fields_table("Core Properties", meta.core.model_dump()))
            if meta.app is not None:
                self._console.print(_fields_table("Application Properties", meta.app.model_dump()))
            if meta.custom_present:
                self._console.info("Custom properties present (docProps/custom.xml)")
            if meta.core is None and meta.app is None:
                self._console.info("No package properties recovered")
        else:
            self._console.info("No structural parser for this format")

    def _display_image(self, meta: ImageMetadata) -> None:
        shown = False
        for title, tags in (("EXIF", meta.exif), ("XMP", meta.xmp), ("GPS", meta.gps)):
            if tags:
                self._console.print(_tag_table(title, tags))
                shown = True
        if not shown:
            self._console.info("No EXIF, XMP or GPS metadata found")

    def display_chunks(self, chunks: tuple[StructuralChunk, ...]) -> None:
        self._console.table(
            "PNG Chunks",
            ["#", "Type", "Offset", "Length"],
            [
                (i, chunk.name, f"0x{chunk.offset:08x}", f"{chunk.size:,}")
                for i, chunk in enumerate(chunks, 1)
            ],
            styles=["dim", "bold", "", ""],
        )

    def display_xml(self, xml_dump: str) -> None:
        self._console.print(Panel(
            escape(xml_dump.rstrip()),
            title="[bold bright_cyan]Raw Metadata XML[/bold bright_cyan]",
            border_style="dim",
        ))

    def display_strings(self, strings: tuple[str, ...]) -> None:
        sample = strings[: self._max_strings]
        tbl = Table(
            title=f"Strings ({len(sample)} of {len(strings):,})",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        tbl.add_column("Category", width=12)
        tbl.add_column("Value", overflow="fold")
        for value in sample:
            category = categorize_string(value)
            colour = _STRING_CATEGORY_COLOURS[category]
            tbl.add_row(f"[{colour}]{category.value}[/{colour}]", escape(value))
        self._console.print(tbl)
