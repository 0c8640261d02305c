"""
Exhibit CLI -- Forensic File Analysis
=====================================

Click-based command-line front end.  Every file gets its own session
identifier (UUID4) and UTC analysis timestamp, is analysed by
:class:`~exhibit.core.engine.ExhibitEngine`, and is rendered to the
terminal or emitted as flat JSON.

Usage::

    # Analyse one or more files
    exhibit evidence/IMG_0042.jpg contract.pdf

    # Declare the MIME type (wins over the extension)
    exhibit upload.bin --mime image/png

    # Flat JSON on stdout
    exhibit report.docx --json

    # One FORENSIC_REPORT_*.json per file
    exhibit *.pdf --report-dir reports/

Exit status is 1 if any file could not be analysed.

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import asyncio
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional

import click

from shared.config import ExhibitConfig
from shared.console import ExhibitConsole
from shared.logger import ExhibitLogger

from exhibit.core.engine import ExhibitEngine, Stamp
from exhibit.core.models import AnalysisFailure, AnalysisResult
from exhibit.output.console import ExhibitConsoleOutput
from exhibit.output.report import ReportGenerator


def _new_stamp() -> Stamp:
    return str(uuid.uuid4()), datetime.now(timezone.utc)


def _load_config(config_path: Optional[str]) -> ExhibitConfig:
    if config_path is not None:
        return ExhibitConfig.load(config_path)
    try:
        return ExhibitConfig.load()
    except (OSError, ValueError):
        return ExhibitConfig()


@click.command("exhibit")
@click.argument("paths", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option(
    "--mime", "-m",
    "mime_type",
    default=None,
    help="Declared MIME type for every file.  Default: guessed from the name.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print flat JSON reports to stdout instead of the console view.",
)
@click.option(
    "--report-dir", "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Write FORENSIC_REPORT_<name>_<session>.json files into this directory.",
)
@click.option(
    "--min-string-length",
    type=click.IntRange(min=1),
    default=None,
    help="Minimum printable run length (default from config: 4).",
)
@click.option(
    "--max-strings",
    type=click.IntRange(min=0),
    default=50,
    show_default=True,
    help="Strings shown per file in the console view.",
)
@click.option(
    "--show-xml",
    is_flag=True,
    default=False,
    help="Show the raw metadata XML dump in the console view.",
)
@click.option(
    "--sniff/--no-sniff",
    default=None,
    help="Route by magic bytes when MIME type and extension do not match.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Per-file deadline in seconds (0 disables).",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a config.toml file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def exhibit_cli(
    paths: tuple[str, ...],
    mime_type: Optional[str],
    json_output: bool,
    report_dir: Optional[str],
    min_string_length: Optional[int],
    max_strings: int,
    show_xml: bool,
    sniff: Optional[bool],
    timeout: Optional[float],
    config_path: Optional[str],
    verbose: bool,
) -> None:
    """Exhibit -- forensic file analysis.

    Hashes (MD5, SHA-1, SHA-256, SHA-512), entropy, printable strings and
    format metadata (JPEG EXIF/XMP/GPS, PNG chunks, PDF document info,
    DOCX package properties) with anomaly warnings.

    PATHS are the files to analyse.
    """
    config = _load_config(config_path)
    if min_string_length is not None:
        config.analysis.min_string_length = min_string_length
    if sniff is not None:
        config.analysis.sniff_content = sniff

    settings = config.global_settings
    if verbose:
        log_level = "DEBUG"
    elif json_output:
        log_level = "ERROR"
    else:
        log_level = settings.log_level

    console = ExhibitConsole(quiet=json_output)
    logger = ExhibitLogger(
        "engine",
        log_level=log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
    )
    engine = ExhibitEngine(config=config, logger=logger)

    if not json_output:
        console.banner(settings.version)

    try:
        with console.status(f"Analysing {len(paths)} file(s)..."):
            items = asyncio.run(
                engine.analyze_many(
                    list(paths),
                    timeout=timeout,
                    mime_type=mime_type,
                    stamp=_new_stamp,
                )
            )
    except KeyboardInterrupt:
        console.warning("Analysis interrupted by user.")
        sys.exit(130)

    if json_output:
        click.echo(ReportGenerator.dumps(items))
    else:
        output = ExhibitConsoleOutput(console, max_strings=max_strings, show_xml=show_xml)
        for item in items:
            if isinstance(item, AnalysisResult):
                output.display(item)
            else:
                output.display_failure(item)

    if report_dir:
        for report_path in ReportGenerator().write_reports(items, report_dir):
            console.success(f"JSON report saved: {report_path}")

    failures = [item for item in items if isinstance(item, AnalysisFailure)]
    if not json_output:
        console.info(
            f"Analysed {len(items) - len(failures)} of {len(items)} file(s)"
        )
    if failures:
        sys.exit(1)


def main() -> None:
    """Entry point for the ``exhibit`` console script."""
    exhibit_cli()


if __name__ == "__main__":
    main()
