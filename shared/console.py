"""
Exhibit Console Interface
=========================

Rich-powered presentation layer for the Exhibit command-line front end.

The class wraps :class:`rich.console.Console` and adds helpers for the
banner, section headers, severity-coloured messages, tables and status
spinners, all with one consistent palette.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

import datetime as _dt
from contextlib import contextmanager
from typing import Any, Generator, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme -- consistent palette across all Exhibit output
# ---------------------------------------------------------------------------
_EXHIBIT_THEME = Theme(
    {
        "exhibit.banner": "bold bright_cyan",
        "exhibit.section": "bold bright_magenta",
        "exhibit.success": "bold green",
        "exhibit.warning": "bold yellow",
        "exhibit.error": "bold red",
        "exhibit.info": "bold bright_blue",
        "exhibit.dim": "dim white",
        "exhibit.highlight": "bold bright_white",
        "exhibit.hash": "bright_green",
    }
)

_BANNER_ART = r"""[bright_cyan]
  ███████╗██╗  ██╗██╗  ██╗██╗██████╗ ██╗████████╗
  ██╔════╝╚██╗██╔╝██║  ██║██║██╔══██╗██║╚══██╔══╝
  █████╗   ╚███╔╝ ███████║██║██████╔╝██║   ██║
  ██╔══╝   ██╔██╗ ██╔══██║██║██╔══██╗██║   ██║
  ███████╗██╔╝ ██╗██║  ██║██║██████╔╝██║   ██║
  ╚══════╝╚═╝  ╚═╝╚═╝  ╚═╝╚═╝╚═════╝ ╚═╝   ╚═╝
[/bright_cyan]"""

_TAGLINE = "Forensic File Analysis"


class ExhibitConsole:
    """Unified console interface for Exhibit.

    Usage::

        con = ExhibitConsole()
        con.banner()
        con.section("Hashes")
        con.success("Analysis complete")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (library / test mode).
            record: Enable Rich recording for text export.
        """
        self._console = Console(
            theme=_EXHIBIT_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner / sections
    # ------------------------------------------------------------------ #

    def banner(self, version: str = "1.0.0") -> None:
        """Display the ASCII-art banner with version and local time."""
        now = _dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        subtitle = (
            f"[exhibit.highlight]{_TAGLINE}[/exhibit.highlight]\n"
            f"[exhibit.dim]Version: {version}  |  {now}[/exhibit.dim]"
        )
        panel = Panel(
            Align.center(Text.from_markup(_BANNER_ART + "\n" + subtitle)),
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.print(panel)

    def section(self, title: str) -> None:
        """Print a section header rule."""
        self._console.rule(
            f"  {title}  ",
            style="exhibit.section",
            characters="─",
        )
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(
            f"[exhibit.success][✔] SUCCESS:[/exhibit.success] {message}"
        )

    def warning(self, message: str) -> None:
        self._console.print(
            f"[exhibit.warning][⚠] WARNING:[/exhibit.warning] {message}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[exhibit.error][✘] ERROR:[/exhibit.error] {message}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[exhibit.info][ℹ] INFO:[/exhibit.info] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Row tuples; each element is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    @contextmanager
    def status(self, message: str = "Working...") -> Generator[Any, None, None]:
        """Context manager showing a spinner with a status message."""
        with self._console.status(
            f"[exhibit.info]{message}[/exhibit.info]",
            spinner="dots",
            spinner_style="bright_cyan",
        ) as status_obj:
            yield status_obj

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def divider(self, style: str = "dim") -> None:
        self._console.rule(style=style)

    def export_text(self) -> str:
        """Export recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
