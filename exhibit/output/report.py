"""
Exhibit JSON Report Generation
==============================

Serialises analysis results into the flat, chain-of-custody report
layout::

    {
      "fileName": "...", "fileSize": 0, "fileType": "<declared MIME>",
      "sessionId": "...", "analysisTime": "...",
      "hashes": {"md5": "...", "sha1": "...", "sha256": "...", "sha512": "..."},
      "entropy": 0.0,
      "metadata": {...},
      "warnings": ["..."]
    }

One report file is written per analysed file, named
``FORENSIC_REPORT_<file name>_<session id>.json``.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Sequence, Union

from exhibit.core.models import AnalysisFailure, AnalysisResult

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def flat_report(result: AnalysisResult) -> dict[str, Any]:
    """Return the flat, JSON-ready report for one result."""
    return {
        "fileName": result.file_name,
        "fileSize": result.file_size,
        "fileType": result.mime_type,
        "sessionId": result.session_id,
        "analysisTime": (
            result.analysis_time.isoformat() if result.analysis_time else None
        ),
        "hashes": result.hashes.model_dump(mode="json", by_alias=True),
        "entropy": result.entropy,
        "metadata": result.metadata.model_dump(mode="json", by_alias=True),
        "warnings": list(result.warnings),
    }


def failure_report(failure: AnalysisFailure) -> dict[str, Any]:
    return failure.model_dump(mode="json", by_alias=True)


def report_file_name(result: AnalysisResult) -> str:
    """``FORENSIC_REPORT_<name>_<session>.json`` with path-unsafe characters replaced."""
    name = _UNSAFE_NAME_CHARS.sub("_", result.file_name) or "file"
    session = _UNSAFE_NAME_CHARS.sub("_", result.session_id or "") or "nosession"
    return f"FORENSIC_REPORT_{name}_{session}.json"


class ReportGenerator:
    """Write flat JSON reports to disk.

    Usage::

        gen = ReportGenerator()
        gen.generate_json(result, "out/report.json")
        gen.write_reports(results, "out/")
    """

    def generate_json(self, result: AnalysisResult, output_path: Union[str, Path]) -> str:
        """Write the flat report for *result* to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(flat_report(result), f, indent=2, ensure_ascii=False, default=str)

        return str(path.resolve())

    def write_reports(
        self,
        items: Sequence[Union[AnalysisResult, AnalysisFailure]],
        output_dir: Union[str, Path],
    ) -> list[str]:
        """Write one report per successful result into *output_dir*.

        Failures are skipped; they carry no evidence to report.

        Returns:
            Absolute paths of the generated reports, in input order.
        """
        directory = Path(output_dir)
        return [
            self.generate_json(item, directory / report_file_name(item))
            for item in items
            if isinstance(item, AnalysisResult)
        ]

    @staticmethod
    def dumps(items: Sequence[Union[AnalysisResult, AnalysisFailure]]) -> str:
        """JSON text for *items*: a single object for one item, else an array."""
        payload = [
            flat_report(item) if isinstance(item, AnalysisResult) else failure_report(item)
            for item in items
        ]
        body: Any = payload[0] if len(payload) == 1 else payload
        return json.dumps(body, indent=2, ensure_ascii=False, default=str)
