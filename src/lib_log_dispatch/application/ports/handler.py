"""Handler port describing the consumer side of a logger broadcast.

Purpose
-------
Define the one capability a collaborator needs to receive records: accept a
single :class:`LogRecord`. Handlers never return a value and their failures are
isolated by the broadcast channel.

Contents
--------
* :class:`HandlerPort` - runtime-checkable protocol with a ``handle`` method.
* ``HandlerLike`` - union accepted by :meth:`Logger.add_handler`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, Union, runtime_checkable

from lib_log_dispatch.domain.records import LogRecord


@runtime_checkable
class HandlerPort(Protocol):
    """Receive records pushed by a logger."""

    def handle(self, record: LogRecord) -> None:
        """Consume ``record``."""


HandlerLike = Union[HandlerPort, Callable[[LogRecord], None]]


def as_callback(handler: HandlerLike) -> Callable[[LogRecord], None]:
    """Return the callable that delivers a record to ``handler``.

    Examples
    --------
    >>> seen = []
    >>> as_callback(seen.append) == seen.append
    True
    >>> as_callback(object())
    Traceback (most recent call last):
    ...
    TypeError: handler must implement handle(record) or be callable
    """

    if isinstance(handler, HandlerPort):
        return handler.handle
    if callable(handler):
        return handler
    raise TypeError("handler must implement handle(record) or be callable")


__all__ = ["HandlerLike", "HandlerPort", "as_callback"]
