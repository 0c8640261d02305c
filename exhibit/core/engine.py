"""
Exhibit Analysis Engine
=======================

Orchestrates the analysis of one file or a batch of files.

For a single file the buffer is read once and four independent, pure
computations run over it concurrently on executor threads:

    1. Digests (MD5, SHA-1, SHA-256, SHA-512)
    2. Format detection and structural parsing
    3. Whole-file Shannon entropy
    4. Printable string extraction

They are joined with :func:`asyncio.gather`; the buffer is never
mutated, so no locking is needed.  Format-independent heuristics are
applied to the joined results and a frozen :class:`AnalysisResult` is
assembled.  If any computation raises, no result is produced.

Batches run files concurrently, bounded by ``global.max_workers``, with
an optional per-file timeout.  A file that fails yields an
:class:`AnalysisFailure` without affecting the others.
"""

from __future__ import annotations

import asyncio
import contextvars
import mimetypes
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

from shared.config import ExhibitConfig
from shared.logger import ExhibitLogger

from exhibit.analyzers.entropy import file_entropy
from exhibit.analyzers.hashes import compute_hashes
from exhibit.analyzers.strings import StringExtractor
from exhibit.core.detector import FormatDetector
from exhibit.core.errors import FatalIoError
from exhibit.core.heuristics import entropy_warnings
from exhibit.core.models import (
    AnalysisFailure,
    AnalysisResult,
    FileType,
    RawFile,
)
from exhibit.parsers.docx_parser import DocxParser
from exhibit.parsers.generic_parser import GenericParser
from exhibit.parsers.image_parser import ImageParser
from exhibit.parsers.magic import MagicIdentifier
from exhibit.parsers.pdf_parser import PdfParser
from exhibit.parsers.png_parser import PngParser

T = TypeVar("T")

BatchItem = Union[AnalysisResult, AnalysisFailure]
Stamp = tuple[Optional[str], Optional[datetime]]


class ExhibitEngine:
    """Forensic analysis pipeline for arbitrary files.

    Usage::

        engine = ExhibitEngine()
        result = await engine.analyze_path("evidence/IMG_0042.jpg")
        print(result.hashes.sha256, result.warnings)

    Or synchronously::

        result = engine.analyze_bytes(data, file_name="report.pdf")

    Args:
        config: Exhibit configuration.  Defaults are used if not provided.
        logger: Logger instance.  A new one is created if not provided.
        detector: Format detector; built from *config* if not provided.
    """

    def __init__(
        self,
        config: ExhibitConfig | None = None,
        logger: ExhibitLogger | None = None,
        detector: FormatDetector | None = None,
    ) -> None:
        self._config: ExhibitConfig = config or ExhibitConfig()
        self._logger: ExhibitLogger = logger or ExhibitLogger("engine")
        analysis = self._config.analysis

        self._magic = MagicIdentifier()
        self._string_extractor = StringExtractor(min_length=analysis.min_string_length)
        self._detector = detector or self._build_detector()

    def _build_detector(self) -> FormatDetector:
        analysis = self._config.analysis
        image_parser = ImageParser(logger=self._logger.child("image"))
        return FormatDetector(
            {
                FileType.IMAGE: image_parser,
                FileType.PNG: PngParser(image_parser, logger=self._logger.child("png")),
                FileType.PDF: PdfParser(logger=self._logger.child("pdf")),
                FileType.DOCX: DocxParser(
                    max_part_size=analysis.max_package_part_size,
                    logger=self._logger.child("docx"),
                ),
                FileType.GENERIC: GenericParser(),
            },
            sniff_content=analysis.sniff_content,
            magic=self._magic,
        )

    @property
    def config(self) -> ExhibitConfig:
        return self._config

    @property
    def detector(self) -> FormatDetector:
        return self._detector

    # ------------------------------------------------------------------ #
    #  Single-file analysis
    # ------------------------------------------------------------------ #

    async def analyze(
        self,
        raw: RawFile,
        session_id: Optional[str] = None,
        analysis_time: Optional[datetime] = None,
    ) -> AnalysisResult:
        """Analyse an in-memory file.

        Args:
            raw: File bytes plus dispatch hints.
            session_id: Caller's session identifier, copied to the result.
            analysis_time: Caller's analysis timestamp, copied to the result.

        Returns:
            The assembled, immutable :class:`AnalysisResult`.
        """
        with self._logger.operation(f"analyze:{raw.file_name or '<memory>'}"):
            with self._logger.timed(f"analysis of {raw.file_name or '<memory>'}"):
                self._logger.info(
                    "Analysing %s (%d bytes)",
                    raw.file_name or "<memory>",
                    raw.size,
                    mime_type=raw.mime_type,
                )
                data = raw.data

                hashes, parsed, entropy, strings = await asyncio.gather(
                    self._offload(compute_hashes, data),
                    self._offload(self._detector.detect_and_parse, raw),
                    self._offload(file_entropy, data),
                    self._offload(self._string_extractor.extract, data),
                )

                warnings = (*parsed.warnings, *entropy_warnings(entropy))
                self._logger.info(
                    "Detected %s, %d warning(s)",
                    parsed.file_type.value,
                    len(warnings),
                    entropy=round(entropy, 4),
                    strings=len(strings),
                )

                return AnalysisResult(
                    file_name=raw.file_name,
                    file_size=raw.size,
                    mime_type=raw.mime_type,
                    file_type=parsed.file_type,
                    signature=self._magic.identify(data),
                    hashes=hashes,
                    entropy=entropy,
                    metadata=parsed.metadata,
                    warnings=warnings,
                    chunks=parsed.chunks,
                    xml_dump=parsed.xml_dump,
                    strings=tuple(strings),
                    session_id=session_id,
                    analysis_time=analysis_time,
                )

    async def analyze_path(
        self,
        path: Union[str, Path],
        mime_type: Optional[str] = None,
        session_id: Optional[str] = None,
        analysis_time: Optional[datetime] = None,
    ) -> AnalysisResult:
        """Read *path* once and analyse it.

        When *mime_type* is ``None`` it is guessed from the file name.

        Raises:
            FatalIoError: If the file is missing, unreadable or larger
                than ``analysis.max_file_size``.
        """
        file_path = Path(path)
        data = await self._offload(self._read, file_path)
        if mime_type is None:
            mime_type = mimetypes.guess_type(file_path.name)[0] or ""
        raw = RawFile(data=data, mime_type=mime_type, file_name=file_path.name)
        return await self.analyze(raw, session_id=session_id, analysis_time=analysis_time)

    def _read(self, path: Path) -> bytes:
        max_size = self._config.analysis.max_file_size
        try:
            size = path.stat().st_size
            if size > max_size:
                raise FatalIoError(
                    str(path), f"file too large: {size:,} bytes (max: {max_size:,} bytes)"
                )
            return path.read_bytes()
        except OSError as exc:
            raise FatalIoError(str(path), exc.strerror or str(exc)) from exc

    # ------------------------------------------------------------------ #
    #  Batch analysis
    # ------------------------------------------------------------------ #

    async def analyze_many(
        self,
        paths: Sequence[Union[str, Path]],
        *,
        timeout: Optional[float] = None,
        mime_type: Optional[str] = None,
        stamp: Optional[Callable[[], Stamp]] = None,
    ) -> list[BatchItem]:
        """Analyse several files concurrently.

        Args:
            paths: Files to analyse.
            timeout: Per-file deadline in seconds.  ``None`` or ``0`` falls
                back to ``analysis.file_timeout``; a non-positive value
                there disables the deadline.
            mime_type: MIME type applied to every file (guessed if ``None``).
            stamp: Called once per file for its ``(session_id, analysis_time)``.

        Returns:
            One entry per input path, in input order: an
            :class:`AnalysisResult` or an :class:`AnalysisFailure`.

        Note:
            A file that exceeds its deadline is reported as a ``timeout``
            failure and releases its ``max_workers`` slot at once.  The
            executor jobs already running for it (hashing, parsing) cannot
            be interrupted; they run to completion in the background and
            their results are discarded.
        """
        deadline = timeout or self._config.analysis.file_timeout or None
        semaphore = asyncio.Semaphore(max(1, self._config.global_settings.max_workers))

        async def _one(path: Union[str, Path]) -> AnalysisResult:
            session_id, analysis_time = stamp() if stamp is not None else (None, None)
            async with semaphore:
                coro = self.analyze_path(
                    path,
                    mime_type=mime_type,
                    session_id=session_id,
                    analysis_time=analysis_time,
                )
                if deadline is not None and deadline > 0:
                    return await asyncio.wait_for(coro, timeout=deadline)
                return await coro

        outcomes = await asyncio.gather(*(_one(p) for p in paths), return_exceptions=True)

        items: list[BatchItem] = []
        for path, outcome in zip(paths, outcomes):
            if isinstance(outcome, AnalysisResult):
                items.append(outcome)
            else:
                items.append(self._failure(Path(path).name, outcome))
        return items

    def _failure(self, file_name: str, exc: BaseException) -> AnalysisFailure:
        if isinstance(exc, FatalIoError):
            self._logger.error("Cannot read %s: %s", file_name, exc.reason)
            return AnalysisFailure(file_name=file_name, error=exc.reason, kind="io")
        if isinstance(exc, asyncio.TimeoutError):
            self._logger.error("Analysis of %s timed out", file_name)
            return AnalysisFailure(file_name=file_name, error="analysis timed out", kind="timeout")
        if not isinstance(exc, Exception):
            raise exc
        self._logger.exception(
            "Analysis of %s failed: %s", file_name, exc, exc_info=exc
        )
        return AnalysisFailure(file_name=file_name, error=str(exc) or type(exc).__name__)

    # ------------------------------------------------------------------ #
    #  Synchronous wrappers
    # ------------------------------------------------------------------ #

    def analyze_sync(
        self,
        raw: RawFile,
        session_id: Optional[str] = None,
        analysis_time: Optional[datetime] = None,
    ) -> AnalysisResult:
        """Synchronous wrapper around :meth:`analyze`.

        Runs on a helper thread when called from inside a running loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        coro_args = (raw, session_id, analysis_time)
        if loop and loop.is_running():
            import concurrent.futures
            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                future = pool.submit(asyncio.run, self.analyze(*coro_args))
                return future.result()
        return asyncio.run(self.analyze(*coro_args))

    def analyze_bytes(
        self,
        data: bytes,
        file_name: str = "",
        mime_type: str = "",
        **kwargs: Any,
    ) -> AnalysisResult:
        """Analyse raw bytes already in memory."""
        raw = RawFile(data=data, mime_type=mime_type, file_name=file_name)
        return self.analyze_sync(raw, **kwargs)

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    async def _offload(func: Callable[..., T], *args: Any) -> T:
        """Run *func* on the default executor, carrying the logging context."""
        loop = asyncio.get_running_loop()
        ctx = contextvars.copy_context()
        return await loop.run_in_executor(None, ctx.run, func, *args)
