"""Domain value objects used by the dispatch core."""

from __future__ import annotations

from .errors import InvalidArgument
from .levels import ALL, BUILTIN_LEVELS, DEBUG, ERROR, FATAL, INFO, OFF, WARNING, Level
from .records import LogRecord

__all__ = [
    "ALL",
    "BUILTIN_LEVELS",
    "DEBUG",
    "ERROR",
    "FATAL",
    "INFO",
    "InvalidArgument",
    "Level",
    "LogRecord",
    "OFF",
    "WARNING",
]
