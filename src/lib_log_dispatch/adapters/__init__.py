"""Concrete adapters: clock, deferred queue and handlers."""

from __future__ import annotations

from .clock import SystemClock
from .console.rich_console import RichConsoleHandler
from .memory import MemoryHandler
from .queue import QueueAdapter

__all__ = ["MemoryHandler", "QueueAdapter", "RichConsoleHandler", "SystemClock"]
