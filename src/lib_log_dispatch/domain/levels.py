"""Severity levels with open-ended numeric ordering.

Purpose
-------
Represent log severities as small value objects so callers can interleave
custom severities with the built-in set without an enum closing it.

Contents
--------
* :class:`Level` value object compared and hashed by ``value``.
* Built-in levels ``DEBUG`` .. ``FATAL`` aligned with :mod:`logging` numbers.
* Sentinels ``ALL`` and ``OFF`` used only as logger thresholds.

System Role
-----------
Consumed by the logger to throttle records and by handlers to pick styles and
icons for presentation.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Level:
    """Named severity compared by its numeric ``value``.

    Two levels with the same ``value`` are equal regardless of name.

    Examples
    --------
    >>> Level("custom", 25) > INFO
    True
    >>> Level("alias", 20) == INFO
    True
    """

    name: str = field(compare=False)
    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"level value must be an int, got {self.value!r}")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return self.value >= other.value

    @property
    def severity(self) -> str:
        """Return the lowercase level name."""

        return self.name.lower()

    @property
    def icon(self) -> str:
        """Return the console glyph for built-in levels, ``""`` otherwise."""

        return _ICON_TABLE.get(self.value, "")

    @property
    def is_sentinel(self) -> bool:
        """Return ``True`` for ``ALL`` and ``OFF``."""

        return self.value in (ALL.value, OFF.value)

    def to_python_level(self) -> int:
        """Return the :mod:`logging` number closest to this level."""

        if self.value == ALL.value:
            return logging.NOTSET
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Level":
        normalized = name.strip().lower()
        try:
            return _BY_NAME[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown log level: {name!r}") from exc

    @classmethod
    def from_python_level(cls, level: int) -> "Level":
        """Translate a stdlib logging number into a :class:`Level`.

        Unknown numbers become anonymous custom levels rather than errors.
        """

        for builtin in BUILTIN_LEVELS:
            if builtin.value == level:
                return builtin
        return cls(logging.getLevelName(level), level)


ALL = Level("all", -sys.maxsize - 1)
DEBUG = Level("debug", logging.DEBUG)
INFO = Level("info", logging.INFO)
WARNING = Level("warning", logging.WARNING)
ERROR = Level("error", logging.ERROR)
FATAL = Level("fatal", logging.CRITICAL)
OFF = Level("off", sys.maxsize)

BUILTIN_LEVELS: tuple[Level, ...] = (DEBUG, INFO, WARNING, ERROR, FATAL)

_BY_NAME: dict[str, Level] = {level.name: level for level in (ALL, *BUILTIN_LEVELS, OFF)}
_BY_NAME["critical"] = FATAL

_ICON_TABLE: dict[int, str] = {
    DEBUG.value: "🐞",
    INFO.value: "ℹ",
    WARNING.value: "⚠",
    ERROR.value: "✖",
    FATAL.value: "☠",
}
# Console glyphs keyed by level value.


__all__ = ["ALL", "BUILTIN_LEVELS", "DEBUG", "ERROR", "FATAL", "INFO", "Level", "OFF", "WARNING"]
