"""
binmagic Structured Logger
===========================

Provides :class:`MagicLogger`, a small facade over :mod:`logging` that
writes colour-coded Rich output to stderr and, optionally, plain-text or
JSON-lines records to a rotating log file.

Records carry the tool name and the current *operation* (for example the
file being decoded) so JSON logs from multi-file runs can be filtered.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import threading
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


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object::

        {"timestamp": "...", "level": "INFO", "logger": "binmagic.engine",
         "message": "...", "tool_name": "engine", "operation": "/bin/ls",
         "extra": {...}}
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

        for attr in ("tool_name", "operation"):
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val

        extra = getattr(record, "magic_extra", None)
        if extra is not None:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class MagicLogger:
    """Context-aware logger bound to one tool component.

    Usage::

        log = MagicLogger("engine", log_file="binmagic.log", json_logs=True)
        with log.operation("/usr/bin/ls"):
            with log.timed("decode"):
                elf = parse_elf(data)
            log.debug("Decoded sections", count=len(elf.sections))

    Args:
        tool_name:       Component name; the stdlib logger is ``binmagic.<tool_name>``.
        log_level:       Minimum severity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file:        Rotating log file path; ``None`` disables file logging.
        json_logs:       If ``True`` the file handler emits JSON lines.
        max_bytes:       Maximum log-file size before rotation (default 10 MiB).
        backup_count:    Number of rotated files to keep.
        console_output:  Attach a Rich stderr handler.
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 3,
        console_output: bool = True,
    ) -> None:
        self._tool_name = tool_name
        self._local = threading.local()
        level = getattr(logging, log_level.upper(), logging.INFO)

        self._logger = logging.getLogger(f"binmagic.{tool_name}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        self._logger.handlers.clear()

        if console_output:
            self._logger.addHandler(RichHandler(
                console=Console(theme=_LOG_THEME, stderr=True),
                level=level,
                show_path=False,
                rich_tracebacks=True,
                markup=False,
            ))

        if log_file is not None:
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
                fh.setFormatter(logging.Formatter(
                    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%dT%H:%M:%S%z",
                ))
            self._logger.addHandler(fh)

    # ------------------------------------------------------------------ #
    #  Operation scope
    # ------------------------------------------------------------------ #

    class _OperationContext:
        def __init__(self, parent: MagicLogger, operation: str) -> None:
            self._parent = parent
            self._operation = operation
            self._prev: str | None = None

        def __enter__(self) -> MagicLogger:
            self._prev = self._parent.current_operation
            self._parent._local.operation = self._operation
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            self._parent._local.operation = self._prev

    def operation(self, name: str) -> _OperationContext:
        """Tag records logged by this thread inside the block with ``operation=<name>``."""
        return self._OperationContext(self, name)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Move non-standard keyword args into ``extra["magic_extra"]``."""
        extra = kwargs.pop("extra", {}) or {}
        standard_keys = {"exc_info", "stack_info", "stacklevel"}
        magic_extra = {k: kwargs.pop(k) for k in list(kwargs) if k not in standard_keys}

        extra["tool_name"] = self._tool_name
        extra["operation"] = self.current_operation
        if magic_extra:
            extra["magic_extra"] = magic_extra

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

    # ------------------------------------------------------------------ #
    #  Timing helper
    # ------------------------------------------------------------------ #

    class _TimingContext:
        def __init__(self, logger_inst: MagicLogger, label: str) -> None:
            self._logger = logger_inst
            self._label = label
            self._start: float = 0.0

        def __enter__(self) -> MagicLogger._TimingContext:
            self._start = time.perf_counter()
            self._logger.debug("Started: %s", self._label)
            return self

        def __exit__(self, *exc: Any) -> None:
            self._logger.debug("Completed: %s (%.3f sec)", self._label, self.elapsed)

        @property
        def elapsed(self) -> float:
            return time.perf_counter() - self._start

    def timed(self, label: str) -> _TimingContext:
        """Log start, finish and elapsed time of the ``with`` block at DEBUG."""
        return self._TimingContext(self, label)

    @property
    def current_operation(self) -> str | None:
        """Operation active on the calling thread, if any."""
        return getattr(self._local, "operation", None)

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger
