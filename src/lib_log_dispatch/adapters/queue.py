"""Thread-based queue adapter backing deferred record delivery.

Purpose
-------
Let an ``async_`` logger return from ``log`` immediately while a dedicated
worker thread hands records to the subscribed handlers.

Contents
--------
* :class:`QueueAdapter` - background worker implementation of :class:`QueuePort`.

System Role
-----------
Owned by one broadcast channel. Deliveries are processed strictly in FIFO
order, the worker starts on the first ``put`` and ``stop`` processes
everything already queued before the thread exits.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from collections.abc import Callable
from typing import Any, Deque

from lib_log_dispatch.application.ports.queue import Delivery, QueuePort


LOGGER = logging.getLogger(__name__)

_STOP = object()


class QueueAdapter(QueuePort):
    """Process deliveries on a background thread.

    Deliveries put by the worker thread itself (a handler logging while it
    handles a record) bypass the bounded queue and run right after the
    delivery in progress, so the worker never blocks on its own backlog.

    Examples
    --------
    >>> from datetime import datetime, timezone
    >>> from lib_log_dispatch.domain import INFO, LogRecord
    >>> seen = []
    >>> adapter = QueueAdapter(worker=lambda delivery: seen.append(delivery.record.message))
    >>> record = LogRecord(INFO, 'msg', datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), 'svc')
    >>> adapter.put(Delivery(record, ()))
    >>> adapter.stop()
    >>> seen
    ['msg']
    """

    def __init__(
        self,
        *,
        worker: Callable[[Delivery], None] | None = None,
        maxsize: int = 2048,
        stop_timeout: float | None = None,
        diagnostic: Callable[[str, dict[str, Any]], None] | None = None,
        thread_name: str = "lib_log_dispatch-queue",
    ) -> None:
        """Create the queue with an optional initial worker and capacity.

        Parameters
        ----------
        worker:
            Callable invoked for each delivery; the broadcast channel installs
            its fan-out via :meth:`set_worker`. It must not raise.
        maxsize:
            Maximum number of queued deliveries. Producers block while the
            queue is full so no record is ever discarded.
        stop_timeout:
            Default deadline (seconds) for :meth:`stop`. ``None`` waits until
            every queued delivery has been processed.
        diagnostic:
            Optional ``(name, payload)`` hook notified when a stop deadline
            passes.
        thread_name:
            Name given to the worker thread.
        """
        self._worker = worker
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=maxsize)
        self._reentrant: Deque[Delivery] = deque()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._idle = threading.Condition()
        self._stop_timeout = stop_timeout
        self._diagnostic = diagnostic
        self._thread_name = thread_name

    def start(self) -> None:
        """Start the background worker thread if it is not already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(target=self._run, name=self._thread_name, daemon=True)
            self._thread.start()

    def stop(self, *, timeout: float | None = None) -> None:
        """Stop the worker thread after it processed every queued delivery.

        Parameters
        ----------
        timeout:
            Per-call override for the stop deadline; falls back to the
            ``stop_timeout`` given at construction.

        Raises
        ------
        RuntimeError
            When the worker is still running once the deadline has passed.
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._queue.put(_STOP)

        effective_timeout = timeout if timeout is not None else self._stop_timeout
        thread.join(effective_timeout)
        if thread.is_alive():
            self._emit_diagnostic("queue_shutdown_timeout", {"timeout": effective_timeout})
            raise RuntimeError("Queue worker failed to stop within the allotted timeout")

        with self._lock:
            if self._thread is thread:
                self._thread = None

    def put(self, delivery: Delivery) -> None:
        """Enqueue ``delivery``, starting the worker on first use."""
        if self.is_worker_thread:
            self._reentrant.append(delivery)
            return
        if not self.is_running:
            self.start()
        self._queue.put(delivery)

    def set_worker(self, worker: Callable[[Delivery], None]) -> None:
        """Swap the worker callable used to process deliveries."""
        self._worker = worker

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until all queued deliveries are processed or ``timeout`` elapses.

        Returns ``True`` when the queue drained fully. Calls made from the
        worker thread itself never wait on their own progress and report
        ``False`` while a delivery is in flight.
        """

        if self.is_worker_thread:
            return self._queue.unfinished_tasks == 0
        with self._idle:
            return self._idle.wait_for(lambda: self._queue.unfinished_tasks == 0, timeout)

    @property
    def is_running(self) -> bool:
        """Return ``True`` while the worker thread is alive."""

        thread = self._thread
        return thread is not None and thread.is_alive()

    @property
    def is_worker_thread(self) -> bool:
        """Return ``True`` when called from the worker thread."""

        return threading.current_thread() is self._thread

    def _run(self) -> None:
        """Internal worker loop draining the queue until stopped."""
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    break
                self._process(item)
                while self._reentrant:
                    self._process(self._reentrant.popleft())
            finally:
                self._queue.task_done()
                with self._idle:
                    self._idle.notify_all()

    def _process(self, delivery: Delivery) -> None:
        if self._worker is not None:
            self._worker(delivery)

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""

        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Queue diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)


__all__ = ["QueueAdapter"]
