"""Immutable record describing one logged event.

Purpose
-------
Carry a single accepted log call from the logger to every subscribed handler
without any party being able to alter it on the way.

Contents
--------
* :class:`LogRecord` frozen dataclass.
* Utility function ``_ensure_aware`` for timestamp validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from .levels import Level


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


_EMPTY_FIELDS: Mapping[str, Any] = MappingProxyType({})


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Immutable log record delivered to handlers.

    Attributes
    ----------
    level:
        :class:`Level` the record was emitted at.
    message:
        Message passed by the caller.
    timestamp:
        Emission time in timezone-aware UTC.
    logger_name:
        Name of the emitting logger (``""`` for anonymous loggers).
    fields:
        Read-only copy of the fields bound by the emitting context.

    Examples
    --------
    >>> from lib_log_dispatch.domain.levels import INFO
    >>> record = LogRecord(INFO, 'ready', datetime(2025, 1, 1, tzinfo=timezone.utc), 'app', {'job': 1})
    >>> record.fields['job']
    1
    >>> record.fields['job'] = 2
    Traceback (most recent call last):
    ...
    TypeError: 'mappingproxy' object does not support item assignment
    """

    level: Level
    message: str
    timestamp: datetime
    logger_name: str = ""
    fields: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_FIELDS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _ensure_aware(self.timestamp))
        if self.fields:
            object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))
        else:
            object.__setattr__(self, "fields", _EMPTY_FIELDS)


__all__ = ["LogRecord"]
