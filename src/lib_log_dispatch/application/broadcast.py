"""Publish/subscribe channel fanning records out to handlers.

Purpose
-------
Deliver every published :class:`LogRecord` to the handlers subscribed at the
moment of publication, either inline (synchronous) or through a queue worker
(deferred), and close the channel after draining what was already queued.

Contents
--------
* :class:`ChannelState` - ``OPEN → CLOSING → CLOSED`` lifecycle.
* :class:`Broadcast` - the channel itself.

System Role
-----------
Each :class:`~lib_log_dispatch.logger.Logger` owns exactly one channel. The
channel is where handler failures are isolated: one handler raising never
prevents the remaining handlers from receiving the same record.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future
from enum import Enum
from typing import Any

from lib_log_dispatch.application.ports.handler import HandlerLike, as_callback
from lib_log_dispatch.application.ports.queue import Delivery, QueuePort
from lib_log_dispatch.domain.records import LogRecord


LOGGER = logging.getLogger(__name__)

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None


class ChannelState(Enum):
    """Lifecycle states of a broadcast channel."""

    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class Broadcast:
    """Ordered subscriber set with synchronous or queued fan-out.

    The subscriber set is read and replaced under one re-entrant lock, so
    concurrent ``subscribe``/``publish`` calls never let a handler miss or
    double-receive a record. In synchronous mode that lock is held while
    handlers run, which serialises delivery per channel. In deferred mode a
    separate enqueue lock orders publishers; the worker never takes it, and a
    full queue never blocks ``subscribe`` or ``close``.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_dispatch.domain import INFO
    >>> channel = Broadcast()
    >>> seen = []
    >>> channel.subscribe(seen.append)
    >>> channel.publish(LogRecord(INFO, 'hi', datetime(2025, 1, 1, tzinfo=timezone.utc)))
    True
    >>> [record.message for record in seen]
    ['hi']
    >>> channel.close().result()
    >>> channel.state
    <ChannelState.CLOSED: 'closed'>
    """

    def __init__(self, *, queue: QueuePort | None = None, diagnostic: DiagnosticHook = None) -> None:
        """Create an open channel.

        Parameters
        ----------
        queue:
            When given, publications are handed to this queue and delivered by
            its worker; ``None`` delivers inline.
        diagnostic:
            Optional ``(name, payload)`` hook notified about handler failures.
        """
        self._lock = threading.RLock()
        self._enqueue_lock = threading.Lock()
        self._subscribers: tuple[Callable[[LogRecord], None], ...] = ()
        self._queue = queue
        self._diagnostic = diagnostic
        self._state = ChannelState.OPEN
        self._close_future: Future[None] | None = None
        if queue is not None:
            queue.set_worker(self._deliver)

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._state is ChannelState.CLOSED

    @property
    def is_deferred(self) -> bool:
        """Return ``True`` when delivery runs on a queue worker."""

        return self._queue is not None

    @property
    def in_worker_thread(self) -> bool:
        """Return ``True`` when called from the deferred delivery worker."""

        return self._queue is not None and self._queue.is_worker_thread

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: HandlerLike) -> None:
        """Add ``handler``; it receives only records published from now on."""

        callback = as_callback(handler)
        with self._lock:
            self._subscribers = self._subscribers + (callback,)

    def publish(self, record: LogRecord) -> bool:
        """Fan ``record`` out to the current subscribers.

        Returns ``False`` when the channel is no longer open and the record was
        dropped.
        """

        if self._queue is None:
            with self._lock:
                delivery = self._snapshot(record)
                if delivery is None:
                    return False
                self._deliver(delivery)
            return True
        if self._queue.is_worker_thread:
            return self._enqueue(record)
        with self._enqueue_lock:
            return self._enqueue(record)

    def drain(self, timeout: float | None = None) -> bool:
        """Wait until queued deliveries have reached their handlers."""

        if self._queue is None:
            return True
        return self._queue.wait_until_idle(timeout)

    def close(self) -> Future[None]:
        """Stop accepting records and resolve once queued records are delivered.

        Repeated calls return the same future.
        """

        with self._lock:
            if self._close_future is not None:
                return self._close_future
            future: Future[None] = Future()
            self._close_future = future
            self._state = ChannelState.CLOSING

        if self._queue is None:
            self._finish_close(future)
        else:
            drainer = threading.Thread(target=self._drain_and_close, args=(future,), name="lib_log_dispatch-close", daemon=True)
            drainer.start()
        return future

    def _drain_and_close(self, future: Future[None]) -> None:
        """Stop the queue worker after it processed everything already queued."""

        assert self._queue is not None
        try:
            # Publishers blocked on a full queue finish enqueueing first.
            with self._enqueue_lock:
                self._queue.stop()
        except RuntimeError as exc:
            LOGGER.error("Broadcast queue did not drain cleanly; closing anyway", exc_info=exc)
        finally:
            self._finish_close(future)

    def _finish_close(self, future: Future[None]) -> None:
        with self._lock:
            self._state = ChannelState.CLOSED
            self._subscribers = ()
        future.set_result(None)

    def _snapshot(self, record: LogRecord) -> Delivery | None:
        """Pair ``record`` with the current subscribers; ``None`` once closing."""

        with self._lock:
            if self._state is not ChannelState.OPEN:
                LOGGER.debug("Dropping record for closed channel %r: %s", record.logger_name, record.message)
                return None
            return Delivery(record, self._subscribers)

    def _enqueue(self, record: LogRecord) -> bool:
        assert self._queue is not None
        delivery = self._snapshot(record)
        if delivery is None:
            return False
        self._queue.put(delivery)
        return True

    def _deliver(self, delivery: Delivery) -> None:
        """Invoke each subscriber once, isolating failures per handler.

        On the deferred worker even ``BaseException`` (``SystemExit`` from a
        handler, for instance) is contained so the worker keeps running.
        Inline delivery lets it propagate to the caller.
        """

        for callback in delivery.subscribers:
            try:
                callback(delivery.record)
            except Exception as exc:  # noqa: BLE001
                self._report_handler_exception(delivery.record, callback, exc)
            except BaseException as exc:
                if self._queue is None:
                    raise
                self._report_handler_exception(delivery.record, callback, exc)

    def _report_handler_exception(self, record: LogRecord, callback: Callable[[LogRecord], None], exc: BaseException) -> None:
        LOGGER.error("Log handler %r raised an exception; continuing", callback, exc_info=exc)
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(
                "handler_error",
                {"logger": record.logger_name, "handler": repr(callback), "exception": repr(exc)},
            )
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Diagnostic hook raised while reporting handler_error", exc_info=diagnostic_exc)


__all__ = ["Broadcast", "ChannelState", "DiagnosticHook"]
