"""Public package surface of the structured logging core.

``Logger(...)`` builds a fresh, unregistered logger; :func:`get_logger` returns
the shared instance registered under a name. Records flow through
:meth:`Logger.add_handler` subscriptions such as :class:`MemoryHandler` or
:class:`RichConsoleHandler`.
"""

from __future__ import annotations

from .adapters import MemoryHandler, RichConsoleHandler
from .application.broadcast import ChannelState
from .application.ports import HandlerPort
from .context import Context, Tracer
from .domain import ALL, DEBUG, ERROR, FATAL, INFO, OFF, WARNING, InvalidArgument, Level, LogRecord
from .logger import Logger
from .runtime import LoggerRegistry, default_registry, get_logger

__all__ = [
    "ALL",
    "ChannelState",
    "Context",
    "DEBUG",
    "ERROR",
    "FATAL",
    "HandlerPort",
    "INFO",
    "InvalidArgument",
    "Level",
    "LogRecord",
    "Logger",
    "LoggerRegistry",
    "MemoryHandler",
    "OFF",
    "RichConsoleHandler",
    "Tracer",
    "WARNING",
    "default_registry",
    "get_logger",
]
