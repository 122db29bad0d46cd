"""Rich-powered console handler implementing :class:`HandlerPort`.

Purpose
-------
Render records as single coloured lines on an interactive terminal.

Contents
--------
* :data:`_STYLE_MAP` - default level-to-style mapping.
* :class:`RichConsoleHandler` - handler subscribed via ``Logger.add_handler``.

System Role
-----------
Human-facing sink used by the ``logdemo`` command. Custom levels fall back to
the style of the nearest built-in level at or below them.
"""

from __future__ import annotations

from typing import Mapping

from rich.console import Console

from lib_log_dispatch.application.ports.handler import HandlerPort
from lib_log_dispatch.domain.levels import BUILTIN_LEVELS, DEBUG, ERROR, FATAL, INFO, WARNING, Level
from lib_log_dispatch.domain.records import LogRecord


_STYLE_MAP: Mapping[Level, str] = {
    DEBUG: "dim",
    INFO: "cyan",
    WARNING: "yellow",
    ERROR: "red",
    FATAL: "bold red",
}

#: Default Rich styles keyed by built-in :class:`Level`.


class RichConsoleHandler(HandlerPort):
    """Render records using Rich formatting with style overrides."""

    def __init__(
        self,
        *,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        styles: Mapping[Level | str, str] | None = None,
    ) -> None:
        """Configure the handler with colour and style overrides.

        ``styles`` keys may be :class:`Level` instances or level names.
        """
        if console is not None:
            self._console = console
        else:
            self._console = Console(force_terminal=force_color or None, no_color=no_color)
        self._no_color = no_color
        merged = dict(_STYLE_MAP)
        for key, value in (styles or {}).items():
            level = Level.from_name(key) if isinstance(key, str) else key
            merged[level] = value
        self._style_map = merged

    def handle(self, record: LogRecord) -> None:
        """Print ``record`` as one line.

        Examples
        --------
        >>> from datetime import datetime, timezone
        >>> from io import StringIO
        >>> record = LogRecord(INFO, 'msg', datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), 'svc')
        >>> console = Console(file=StringIO(), record=True)
        >>> RichConsoleHandler(console=console).handle(record)
        >>> 'msg' in console.export_text()
        True
        """
        style = "" if self._no_color else self.style_for(record.level)
        self._console.print(self.format_line(record), style=style, highlight=False, markup=False)

    def style_for(self, level: Level) -> str:
        """Return the configured style for ``level``."""

        if level in self._style_map:
            return self._style_map[level]
        candidates = [builtin for builtin in BUILTIN_LEVELS if builtin <= level]
        return self._style_map.get(candidates[-1], "") if candidates else ""

    @staticmethod
    def format_line(record: LogRecord) -> str:
        """Return a human-friendly console line for ``record``.

        Examples
        --------
        >>> from datetime import datetime, timezone
        >>> record = LogRecord(WARNING, 'disk low', datetime(2025, 9, 30, 12, 0, tzinfo=timezone.utc), 'fs', {'free': '2%'})
        >>> RichConsoleHandler.format_line(record)
        '2025-09-30T12:00:00+00:00 ⚠  WARNING fs - disk low free=2%'
        """
        fields = "" if not record.fields else " " + " ".join(f"{key}={value}" for key, value in sorted(record.fields.items()))
        icon = f"{record.level.icon} " if record.level.icon else ""
        return f"{record.timestamp.isoformat()} {icon}{record.level.severity.upper():>8} {record.logger_name} - {record.message}{fields}"


__all__ = ["RichConsoleHandler"]
