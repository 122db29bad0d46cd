"""Error types raised by the dispatch core."""

from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when a logger receives an argument it can never accept.

    Covers emitting at the ``ALL``/``OFF`` sentinels and assigning ``None`` as
    a threshold. The logger state is left untouched when it is raised.
    """


__all__ = ["InvalidArgument"]
