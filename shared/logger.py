"""
PhantomHash Structured Logger
==============================

:class:`PhantomLogger` is the logging facade used by every PhantomHash
component. Records go to a Rich console handler on stderr and, when a log
file is configured, to a size-rotated file as plain text or JSON lines.

Two scoped helpers decorate records:

* ``operation(name)`` tags every record emitted inside the block. The tag
  lives in a :class:`contextvars.ContextVar`, so concurrent workers logging
  through the same instance keep their own tags.
* ``timed(label)`` logs the start at DEBUG and the elapsed wall time at
  INFO when the block exits.

Passwords are never passed to the logger; callers log counts and paths.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - PEP 567 -- Context Variables (2017).
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import contextvars
import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
    }
)

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Keyword arguments the stdlib logger understands; everything else is extra data.
_STDLIB_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})

_current_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phantomhash_operation", default=None
)


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


# ============================ Formatting ===================================


class _JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Example::

        {"timestamp": "2026-01-01T10:00:00+00:00", "level": "WARNING",
         "logger": "phantomhash.engine", "message": "Could not open file ...",
         "operation": "load", "extra": {"source": "NordVPN.txt"}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry["tool_name"] = getattr(record, "tool_name", None) or record.name
        operation = getattr(record, "operation", None)
        if operation:
            entry["operation"] = operation
        extra = getattr(record, "phantom_extra", None)
        if extra:
            entry["extra"] = extra
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _ColorConsoleHandler(RichHandler):
    """RichHandler writing to stderr with the PhantomHash log theme.

    Markup is off: messages may contain file paths with square brackets.
    """

    def __init__(self, level: int) -> None:
        super().__init__(
            level=level,
            console=Console(theme=_LOG_THEME, stderr=True),
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )


def _file_handler(
    path: Path,
    level: int,
    *,
    json_logs: bool,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    return handler


# ============================ Timing =======================================


@dataclass
class Timer:
    """Elapsed-time holder yielded by :meth:`PhantomLogger.timed`."""

    label: str
    started: float = 0.0
    finished: float | None = None

    @property
    def elapsed(self) -> float:
        end = self.finished if self.finished is not None else time.perf_counter()
        return end - self.started


# ============================ PhantomLogger ================================


class PhantomLogger:
    """Component logger with operation tags and timing.

    Usage::

        log = PhantomLogger("phantomhash.frequency", log_file="logs/ph.log")
        with log.operation("merge"):
            log.debug("Merging chunk %d", idx, chunk=idx)
        with log.timed("frequency analysis"):
            ...

    Keyword arguments other than ``exc_info``, ``stack_info`` and
    ``stacklevel`` are collected into the record's ``extra`` payload,
    which the JSON formatter writes out.

    Args:
        tool_name:      Logger name, conventionally ``phantomhash.<component>``.
        log_level:      Minimum level name (DEBUG, INFO, WARNING, ERROR).
        log_file:       Rotating log file; ``None`` disables file output.
        json_logs:      Write JSON lines instead of plain text to the file.
        max_bytes:      Rotation size of the log file.
        backup_count:   Rotated files to keep.
        console_output: Attach the Rich stderr handler.
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._tool_name = tool_name
        level = _resolve_level(log_level)

        self._logger = logging.getLogger(tool_name)
        self._logger.setLevel(level)
        self._logger.propagate = False
        # Re-creating a component logger replaces its handlers.
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        if console_output:
            self._logger.addHandler(_ColorConsoleHandler(level))
        if log_file is not None:
            self._logger.addHandler(
                _file_handler(
                    Path(log_file),
                    level,
                    json_logs=json_logs,
                    max_bytes=max_bytes,
                    backup_count=backup_count,
                )
            )

    @classmethod
    def from_config(cls, tool_name: str, config: Any) -> PhantomLogger:
        """Build a logger from the ``[global]`` section of a PhantomConfig."""
        settings = config.global_settings
        return cls(
            tool_name,
            log_level="DEBUG" if settings.debug else settings.log_level,
            log_file=settings.log_file,
            json_logs=settings.log_json,
        )

    # ------------------------------------------------------------------ #
    #  Scopes
    # ------------------------------------------------------------------ #

    @contextmanager
    def operation(self, name: str) -> Iterator[PhantomLogger]:
        """Tag records emitted inside the block with ``operation=name``."""
        token = _current_operation.set(name)
        try:
            yield self
        finally:
            _current_operation.reset(token)

    @contextmanager
    def timed(self, label: str) -> Iterator[Timer]:
        """Log start and elapsed time of the block.

        Usage::

            with log.timed("entropy preload") as timer:
                cache.preload(corpus)
            timer.elapsed
        """
        timer = Timer(label, started=time.perf_counter())
        self.debug("Started: %s", label)
        try:
            yield timer
        finally:
            timer.finished = time.perf_counter()
            self.info("Completed: %s (%.3f sec)", label, timer.elapsed)

    # ------------------------------------------------------------------ #
    #  Emitters
    # ------------------------------------------------------------------ #

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        passthrough = {k: kwargs.pop(k) for k in list(kwargs) if k in _STDLIB_KWARGS}
        passthrough.setdefault("stacklevel", 3)
        extra = {
            "tool_name": self._tool_name,
            "operation": _current_operation.get(),
            "phantom_extra": kwargs or None,
        }
        self._logger.log(level, msg, *args, extra=extra, **passthrough)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, args, kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """ERROR-level record carrying the active exception's traceback."""
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, kwargs)

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def underlying(self) -> logging.Logger:
        """The wrapped :class:`logging.Logger`."""
        return self._logger
