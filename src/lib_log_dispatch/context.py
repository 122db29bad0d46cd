"""Field-bound logger views and scoped trace spans.

Purpose
-------
Attach a fixed set of fields to records without mutating the logger that
emits them, and time a unit of work with a start/stop record pair.

Contents
--------
* :class:`Context` - immutable logger view carrying bound fields.
* :class:`Tracer` - handle returned by :meth:`Context.trace`.
* ``TRACE_FIELD`` / ``DURATION_FIELD`` - field names used by trace records.

System Role
-----------
Every log call goes through a :class:`Context`. A logger owns one with empty
fields for its direct methods; :meth:`Logger.bind` hands out new ones.
Filtering and dispatch stay with the logger.
"""

from __future__ import annotations

import time
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from lib_log_dispatch.domain.levels import DEBUG, ERROR, FATAL, INFO, WARNING, Level

if TYPE_CHECKING:
    from lib_log_dispatch.logger import Logger


TRACE_FIELD = "trace"
DURATION_FIELD = "duration"
TRACE_LEVEL = INFO


class Context:
    """Logger view that stamps its bound fields onto every record.

    Examples
    --------
    >>> from lib_log_dispatch import Logger, MemoryHandler
    >>> logger = Logger('ctx')
    >>> handler = MemoryHandler()
    >>> logger.add_handler(handler)
    >>> request = logger.bind({'request_id': 'r-1'})
    >>> request.info('accepted')
    >>> dict(handler.records[0].fields)
    {'request_id': 'r-1'}
    """

    __slots__ = ("_logger", "_fields")

    def __init__(self, logger: "Logger", fields: Mapping[str, Any] | None = None) -> None:
        self._logger = logger
        self._fields: Mapping[str, Any] = MappingProxyType(dict(fields or {}))

    @property
    def logger(self) -> "Logger":
        return self._logger

    @property
    def fields(self) -> Mapping[str, Any]:
        """Return the read-only fields attached to records."""

        return self._fields

    def bind(self, fields: Mapping[str, Any] | None = None, **kwargs: Any) -> "Context":
        """Return a new context whose fields overlay ``fields`` on this one's."""

        merged = {**self._fields, **(fields or {}), **kwargs}
        return Context(self._logger, merged)

    def log(self, level: Level, message: str) -> None:
        self._emit(level, message)

    def debug(self, message: str) -> None:
        self._emit(DEBUG, message)

    def info(self, message: str) -> None:
        self._emit(INFO, message)

    def warning(self, message: str) -> None:
        self._emit(WARNING, message)

    def error(self, message: str) -> None:
        self._emit(ERROR, message)

    def fatal(self, message: str, die: bool = True) -> None:
        """Emit a ``FATAL`` record and, when ``die`` is true, exit the process.

        With ``die=False`` this behaves like the other severity shortcuts.
        """
        self._emit(FATAL, message)
        if die:
            self._logger._die()

    def trace(self, message: str) -> "Tracer":
        """Emit a start record and return the handle that emits the stop record."""

        return Tracer(self, message)

    def _emit(self, level: Level, message: str, extra: Mapping[str, Any] | None = None) -> None:
        fields = {**self._fields, **extra} if extra else self._fields
        self._logger._emit(level, message, fields)

    def __repr__(self) -> str:
        return f"Context(logger={self._logger.name!r}, fields={dict(self._fields)!r})"


class Tracer:
    """Scoped unit of work bracketed by a start and a stop record.

    The stop record carries the elapsed wall time in seconds under
    ``DURATION_FIELD``. Usable as a context manager.

    Examples
    --------
    >>> from lib_log_dispatch import Logger, MemoryHandler
    >>> logger = Logger('trace')
    >>> handler = MemoryHandler()
    >>> logger.add_handler(handler)
    >>> with logger.trace('import batch'):
    ...     pass
    >>> [record.fields['trace'] for record in handler.records]
    ['start', 'stop']
    """

    def __init__(self, context: Context, message: str, *, level: Level = TRACE_LEVEL) -> None:
        self._context = context
        self._message = message
        self._level = level
        self._duration: float | None = None
        self._started_at = time.monotonic()
        context._emit(level, message, {TRACE_FIELD: "start"})

    @property
    def message(self) -> str:
        return self._message

    @property
    def is_stopped(self) -> bool:
        return self._duration is not None

    @property
    def duration(self) -> float | None:
        """Return the elapsed seconds once stopped, ``None`` before."""

        return self._duration

    def stop(self, message: str | None = None) -> float:
        """Emit the stop record and return the elapsed seconds.

        Only the first call emits; later calls return the recorded duration.
        """
        if self._duration is not None:
            return self._duration
        self._duration = time.monotonic() - self._started_at
        self._context._emit(
            self._level,
            message if message is not None else self._message,
            {TRACE_FIELD: "stop", DURATION_FIELD: self._duration},
        )
        return self._duration

    def __enter__(self) -> "Tracer":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


__all__ = ["Context", "DURATION_FIELD", "TRACE_FIELD", "TRACE_LEVEL", "Tracer"]
