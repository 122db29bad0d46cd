"""Port describing the deferred delivery queue."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from lib_log_dispatch.domain.records import LogRecord


@dataclass(slots=True, frozen=True)
class Delivery:
    """A record paired with the subscribers it was published to."""

    record: LogRecord
    subscribers: tuple[Callable[[LogRecord], None], ...]


@runtime_checkable
class QueuePort(Protocol):
    """Hand deliveries to a background worker."""

    def put(self, delivery: Delivery) -> None:
        """Enqueue ``delivery`` for asynchronous processing."""

    def set_worker(self, worker: Callable[[Delivery], None]) -> None:
        """Install the callable executed for every delivery."""

    def stop(self, *, timeout: float | None = None) -> None:
        """Stop the worker once every queued delivery has been processed."""

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued delivery has been processed."""

    @property
    def is_worker_thread(self) -> bool:
        """Return ``True`` when called from the worker thread."""


__all__ = ["Delivery", "QueuePort"]
