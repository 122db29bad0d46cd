"""Registry mapping logger names to their shared instances."""

from __future__ import annotations

from collections.abc import Callable
from threading import RLock
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from lib_log_dispatch.logger import Logger


class LoggerRegistry:
    """Name → :class:`Logger` mapping holding at most one logger per name.

    Entries are never evicted; closing a logger leaves it registered.

    Examples
    --------
    >>> from lib_log_dispatch import Logger
    >>> registry = LoggerRegistry()
    >>> first = registry.get_or_create('db', lambda: Logger('db'))
    >>> registry.get_or_create('db', lambda: Logger('other')) is first
    True
    """

    def __init__(self) -> None:
        self._loggers: dict[str, "Logger"] = {}
        self._lock = RLock()

    def get_or_create(self, name: str, factory: Callable[[], "Logger"]) -> "Logger":
        """Return the logger registered as ``name``, building it on first use.

        ``factory`` runs at most once per name; lookup and insertion are one
        atomic step.
        """

        with self._lock:
            logger = self._loggers.get(name)
            if logger is None:
                logger = factory()
                self._loggers[name] = logger
            return logger

    def get(self, name: str) -> "Logger | None":
        with self._lock:
            return self._loggers.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._loggers)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._loggers

    def __len__(self) -> int:
        with self._lock:
            return len(self._loggers)

    def __iter__(self) -> Iterator["Logger"]:
        with self._lock:
            return iter(list(self._loggers.values()))


_DEFAULT_REGISTRY = LoggerRegistry()
# Created once at import; lives until process exit.


def default_registry() -> LoggerRegistry:
    """Return the process-wide registry used when none is injected."""

    return _DEFAULT_REGISTRY


__all__ = ["LoggerRegistry", "default_registry"]
