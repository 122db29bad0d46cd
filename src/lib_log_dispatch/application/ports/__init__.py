"""Protocols the dispatch core depends on."""

from __future__ import annotations

from .handler import HandlerLike, HandlerPort, as_callback
from .queue import Delivery, QueuePort
from .time import ClockPort

__all__ = ["ClockPort", "Delivery", "HandlerLike", "HandlerPort", "QueuePort", "as_callback"]
