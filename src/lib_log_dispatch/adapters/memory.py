"""In-memory handler retaining received records.

Purpose
-------
Keep records in process memory so tests and interactive sessions can inspect
exactly what a logger delivered, in delivery order.

Contents
--------
* :class:`MemoryHandler` with optional bounded retention.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Iterator

from lib_log_dispatch.application.ports.handler import HandlerPort
from lib_log_dispatch.domain.records import LogRecord


class MemoryHandler(HandlerPort):
    """Collect delivered records, oldest first.

    Examples
    --------
    >>> from lib_log_dispatch import Logger
    >>> logger = Logger('memory')
    >>> handler = MemoryHandler()
    >>> logger.add_handler(handler)
    >>> logger.info('stored')
    >>> [record.message for record in handler.records]
    ['stored']
    """

    def __init__(self, *, max_records: int | None = None) -> None:
        if max_records is not None and max_records <= 0:
            raise ValueError("max_records must be positive")
        self._records: Deque[LogRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def handle(self, record: LogRecord) -> None:
        """Append ``record``, evicting the oldest entry when bounded."""
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[LogRecord]:
        """Return a snapshot of the retained records."""

        with self._lock:
            return list(self._records)

    @property
    def max_records(self) -> int | None:
        return self._records.maxlen

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __iter__(self) -> Iterator[LogRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = ["MemoryHandler"]
