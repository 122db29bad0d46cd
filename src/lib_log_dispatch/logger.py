"""Logger: severity threshold, handler subscription and record dispatch.

Purpose
-------
Turn level-gated log calls into immutable records and broadcast them to the
subscribed handlers, with synchronous (ordered, inline) or deferred (queued)
delivery and a draining, idempotent close.

Contents
--------
* :class:`Logger` - the dispatch core.

System Role
-----------
Composition point of the package: wires the clock, the broadcast channel and,
for deferred loggers, the queue adapter. ``Logger(...)`` always builds a fresh,
unregistered instance; registry-backed lookup lives in
:func:`lib_log_dispatch.runtime.get_logger`.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import threading
from concurrent.futures import Future
from typing import Any, Mapping

from lib_log_dispatch.adapters.clock import SystemClock
from lib_log_dispatch.adapters.queue import QueueAdapter
from lib_log_dispatch.application.broadcast import Broadcast, ChannelState, DiagnosticHook
from lib_log_dispatch.application.ports import ClockPort, HandlerLike
from lib_log_dispatch.context import Context, Tracer
from lib_log_dispatch.domain.errors import InvalidArgument
from lib_log_dispatch.domain.levels import INFO, Level
from lib_log_dispatch.domain.records import LogRecord


LOGGER = logging.getLogger(__name__)

FATAL_EXIT_CODE = 1


def _exit_process(code: int) -> None:
    """End the whole process from a thread other than the main one."""

    logging.shutdown()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(code)


def _coerce_level(level: Level | str | None) -> Level:
    """Normalise threshold inputs (level or name) into :class:`Level`.

    Examples
    --------
    >>> _coerce_level("warning").name
    'warning'
    >>> _coerce_level(None)
    Traceback (most recent call last):
    ...
    lib_log_dispatch.domain.errors.InvalidArgument: level must not be None
    """
    if level is None:
        raise InvalidArgument("level must not be None")
    if isinstance(level, Level):
        return level
    if isinstance(level, str):
        try:
            return Level.from_name(level)
        except ValueError as exc:
            raise InvalidArgument(str(exc)) from exc
    raise InvalidArgument(f"level must be a Level, got {type(level).__name__}")


class Logger:
    """Named logger filtering records by severity and broadcasting them.

    Parameters
    ----------
    name:
        Logger name stamped on every record. Defaults to ``""``.
    level:
        Threshold; records below it are dropped. Defaults to ``INFO``.
    async_:
        ``False`` delivers records to handlers before ``log`` returns, in call
        order. ``True`` queues them for a worker thread; each handler still
        sees records in emission order.
    clock:
        Source of record timestamps; defaults to :class:`SystemClock`.
    diagnostic:
        Optional ``(name, payload)`` hook notified about handler failures and
        about a deferred close that missed ``close_timeout``.
    close_timeout:
        Deferred loggers only: seconds :meth:`close` waits for the worker to
        drain before completing anyway. ``None`` waits for every queued record.

    Examples
    --------
    >>> from lib_log_dispatch import DEBUG, MemoryHandler
    >>> logger = Logger('app')
    >>> handler = MemoryHandler()
    >>> logger.add_handler(handler)
    >>> logger.debug('hidden')
    >>> logger.info('shown')
    >>> [record.message for record in handler.records]
    ['shown']
    >>> logger.level = DEBUG
    >>> logger.debug('now visible')
    >>> len(handler)
    2
    """

    def __init__(
        self,
        name: str = "",
        level: Level | str = INFO,
        async_: bool = False,
        *,
        clock: ClockPort | None = None,
        diagnostic: DiagnosticHook = None,
        close_timeout: float | None = None,
    ) -> None:
        self._name = name
        self._level = _coerce_level(level)
        self._clock: ClockPort = clock if clock is not None else SystemClock()
        queue = (
            QueueAdapter(stop_timeout=close_timeout, diagnostic=diagnostic, thread_name=f"lib_log_dispatch-queue[{name}]")
            if async_
            else None
        )
        self._broadcast = Broadcast(queue=queue, diagnostic=diagnostic)
        self._context = Context(self)

    @property
    def name(self) -> str:
        return self._name

    @property
    def level(self) -> Level:
        """Return the current threshold."""

        return self._level

    @level.setter
    def level(self, level: Level | str) -> None:
        """Replace the threshold; ``None`` raises :class:`InvalidArgument`."""

        self._level = _coerce_level(level)

    @property
    def is_async(self) -> bool:
        return self._broadcast.is_deferred

    @property
    def is_closed(self) -> bool:
        """Return ``True`` once :meth:`close` has finished draining."""

        return self._broadcast.is_closed

    @property
    def state(self) -> ChannelState:
        return self._broadcast.state

    @property
    def handler_count(self) -> int:
        return self._broadcast.subscriber_count

    def add_handler(self, handler: HandlerLike) -> None:
        """Subscribe ``handler`` to records emitted from now on.

        ``handler`` is either a :class:`HandlerPort` or a plain callable taking
        one :class:`LogRecord`.
        """
        self._broadcast.subscribe(handler)

    def log(self, level: Level, message: str) -> None:
        """Emit ``message`` at ``level`` unless throttled.

        Raises
        ------
        InvalidArgument
            When ``level`` is the ``ALL`` or ``OFF`` sentinel.
        """
        self._context.log(level, message)

    def debug(self, message: str) -> None:
        self._context.debug(message)

    def info(self, message: str) -> None:
        self._context.info(message)

    def warning(self, message: str) -> None:
        self._context.warning(message)

    def error(self, message: str) -> None:
        self._context.error(message)

    def fatal(self, message: str, die: bool = True) -> None:
        """Emit a ``FATAL`` record; exit the process afterwards when ``die``."""

        self._context.fatal(message, die)

    def trace(self, message: str) -> Tracer:
        return self._context.trace(message)

    def bind(self, fields: Mapping[str, Any] | None = None, **kwargs: Any) -> Context:
        """Return a :class:`Context` attaching ``fields`` to its records."""

        return self._context.bind(fields, **kwargs)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until every queued record reached its handlers.

        Always ``True`` for synchronous loggers.
        """
        return self._broadcast.drain(timeout)

    def close(self) -> Future[None]:
        """Close the output stream.

        Returns a future resolving once already-queued records have been
        delivered; :attr:`is_closed` is ``True`` from then on. Records logged
        afterwards are dropped silently. Calling ``close`` again returns the
        same future.
        """
        return self._broadcast.close()

    async def close_async(self) -> None:
        """Await :meth:`close` from asyncio code."""

        await asyncio.wrap_future(self.close())

    def _emit(self, level: Level, message: str, fields: Mapping[str, Any]) -> None:
        if not isinstance(level, Level) or level.is_sentinel:
            raise InvalidArgument(f"cannot emit a record at level {level!r}")
        if level < self._level:
            return
        record = LogRecord(
            level=level,
            message=message,
            timestamp=self._clock.now(),
            logger_name=self._name,
            fields=fields,
        )
        self._broadcast.publish(record)

    def _die(self) -> None:
        """Terminate the process once the fatal record has been delivered.

        On the main thread this raises :class:`SystemExit` so ``finally``
        blocks and ``atexit`` hooks run. Raised elsewhere it would only end that
        thread, so other threads end the process with :func:`os._exit`.
        A handler on the deferred worker cannot wait for its own queue; a
        helper thread waits instead and the handler returns.
        """
        if self._broadcast.in_worker_thread:
            helper = threading.Thread(target=self._drain_and_exit, name=f"lib_log_dispatch-fatal[{self._name}]", daemon=True)
            helper.start()
            return
        if threading.current_thread() is threading.main_thread():
            self._broadcast.drain()
            LOGGER.debug("Fatal record on logger %r; exiting with status %d", self._name, FATAL_EXIT_CODE)
            raise SystemExit(FATAL_EXIT_CODE)
        self._drain_and_exit()

    def _drain_and_exit(self) -> None:
        self._broadcast.drain()
        LOGGER.debug("Fatal record on logger %r; ending process with status %d", self._name, FATAL_EXIT_CODE)
        _exit_process(FATAL_EXIT_CODE)

    def __repr__(self) -> str:
        return f"Logger(name={self._name!r}, level={self._level.name}, async_={self.is_async}, state={self.state.value})"


__all__ = ["Logger"]
