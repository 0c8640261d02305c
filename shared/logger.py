"""
Exhibit Structured Logger
=========================

Provides :class:`ExhibitLogger`, a logging facade that writes Rich
console output to stderr and, optionally, plain-text or JSON-lines
records to a rotating file.

The active *operation* is held in a :class:`contextvars.ContextVar`, so
analyses running concurrently on the event loop or on executor threads
each see their own value.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import contextvars
import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_current_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "exhibit_operation", default=None
)


# ========================== JSON Formatter =================================


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object.

    Output fields::

        {
          "timestamp": "...",
          "level": "INFO",
          "logger": "exhibit.engine",
          "message": "...",
          "component": "engine",
          "operation": "analyze:report.pdf",
          "extra": { ... },
          "exc_info": "..."
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in ("component", "operation"):
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val

        extra = getattr(record, "exhibit_extra", None)
        if extra is not None:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


# ========================== Rich Console Handler ===========================


class _ColorConsoleHandler(RichHandler):
    """:class:`rich.logging.RichHandler` bound to stderr with the log theme."""

    def __init__(self, **kwargs: Any) -> None:
        console = Console(theme=_LOG_THEME, stderr=True)
        super().__init__(
            console=console,
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            **kwargs,
        )


# ========================== ExhibitLogger ==================================


class ExhibitLogger:
    """Structured, context-aware logger for Exhibit components.

    Each instance is bound to a *component* name (``"engine"``,
    ``"pdf"``...) and tags every record with it plus the active operation.

    Usage::

        log = ExhibitLogger("engine", log_file="exhibit.log", json_logs=True)
        with log.operation("analyze:evidence.jpg"):
            log.info("Detected format", file_type="IMAGE")

    Args:
        component:       Name appended to the ``exhibit.`` logger namespace.
        log_level:       Minimum severity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file:        Path to the rotating log file. ``None`` or ``""`` disables it.
        json_logs:       If ``True`` the file handler emits JSON lines.
        max_bytes:       Maximum log-file size before rotation (default 10 MiB).
        backup_count:    Number of rotated backup files to keep.
        console_output:  If ``True`` attach a Rich console handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._component = component
        level = getattr(logging, log_level.upper(), logging.INFO)

        self._logger = logging.getLogger(f"exhibit.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._logger.handlers.clear()

        if console_output:
            self._logger.addHandler(_ColorConsoleHandler(level=level))

        if log_file:
            file_path = Path(log_file)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            fh.setLevel(level)
            if json_logs:
                fh.setFormatter(_JSONFormatter())
            else:
                fh.setFormatter(
                    logging.Formatter(
                        fmt=(
                            "%(asctime)s | %(levelname)-8s | "
                            "%(name)s | %(operation)s | %(message)s"
                        ),
                        datefmt="%Y-%m-%dT%H:%M:%S%z",
                    )
                )
            self._logger.addHandler(fh)

        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

    # ------------------------------------------------------------------ #
    #  Derived loggers
    # ------------------------------------------------------------------ #

    @classmethod
    def quiet(cls, component: str) -> ExhibitLogger:
        """A logger with no console or file output."""
        return cls(component, console_output=False)

    def child(self, component: str) -> ExhibitLogger:
        """Return a logger for *component* that shares this logger's handlers."""
        clone = object.__new__(ExhibitLogger)
        clone._component = component
        clone._logger = self._logger.getChild(component)
        clone._logger.setLevel(self._logger.level)
        clone._logger.propagate = True
        return clone

    # ------------------------------------------------------------------ #
    #  Context management -- operation scope
    # ------------------------------------------------------------------ #

    class _OperationContext:
        """Temporarily binds an operation name in the current context."""

        def __init__(self, parent: ExhibitLogger, operation: str) -> None:
            self._parent = parent
            self._operation = operation
            self._token: contextvars.Token[str | None] | None = None

        def __enter__(self) -> ExhibitLogger:
            self._token = _current_operation.set(self._operation)
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            if self._token is not None:
                _current_operation.reset(self._token)

    def operation(self, name: str) -> _OperationContext:
        """Return a context manager that sets the *operation* field.

        Usage::

            with log.operation("parse:docx"):
                log.warning("core.xml is not well-formed")
        """
        return self._OperationContext(self, name)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        extra = kwargs.pop("extra", {}) or {}

        fields: dict[str, Any] = {}
        standard_keys = {"exc_info", "stack_info", "stacklevel"}
        for key in list(kwargs):
            if key not in standard_keys:
                fields[key] = kwargs.pop(key)

        extra["component"] = self._component
        extra["operation"] = _current_operation.get()
        if fields:
            extra["exhibit_extra"] = fields

        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **self._enrich(kwargs))

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **self._enrich(kwargs))

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **self._enrich(kwargs))

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **self._enrich(kwargs))

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log at ERROR level with the current exception's traceback."""
        kwargs["exc_info"] = kwargs.get("exc_info", True)
        self._logger.error(msg, *args, **self._enrich(kwargs))

    # ------------------------------------------------------------------ #
    #  Timing helper
    # ------------------------------------------------------------------ #

    class _TimingContext:
        """Measures and logs elapsed time for a block."""

        def __init__(self, logger_inst: ExhibitLogger, label: str) -> None:
            self._logger = logger_inst
            self._label = label
            self._start: float = 0.0

        def __enter__(self) -> ExhibitLogger._TimingContext:
            self._start = time.perf_counter()
            self._logger.debug("Started: %s", self._label)
            return self

        def __exit__(self, *exc: Any) -> None:
            self._logger.info(
                "Completed: %s (%.3f sec)", self._label, self.elapsed
            )

        @property
        def elapsed(self) -> float:
            """Seconds elapsed since entering the context."""
            return time.perf_counter() - self._start

    def timed(self, label: str) -> _TimingContext:
        """Context manager that logs start / finish and elapsed time."""
        return self._TimingContext(self, label)

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def component(self) -> str:
        return self._component

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger
