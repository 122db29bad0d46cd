"""Registry-backed logger lookup.

Purpose
-------
Expose :func:`get_logger`, the shared-singleton entry point. Loggers obtained
here are registered by name; ``Logger(...)`` bypasses this module entirely.

Contents
--------
* :func:`get_logger` - idempotent lookup-or-create by name.
* :class:`LoggerRegistry` / :func:`default_registry` - the registry itself,
  injectable for callers that want isolation from the process-wide one.
"""

from __future__ import annotations

from lib_log_dispatch.config import env_async, env_level
from lib_log_dispatch.domain.levels import Level
from lib_log_dispatch.logger import Logger

from ._registry import LoggerRegistry, default_registry


def get_logger(
    name: str,
    level: Level | str | None = None,
    async_: bool | None = None,
    *,
    registry: LoggerRegistry | None = None,
) -> Logger:
    """Return the logger registered as ``name``, creating it on first use.

    ``level`` and ``async_`` only apply when the logger is created; an existing
    logger is returned unchanged. Omitted values fall back to ``LOG_LEVEL`` /
    ``LOG_ASYNC``; unset or invalid variables mean ``INFO`` / synchronous
    delivery, so a misconfigured environment never makes the lookup fail.

    Examples
    --------
    >>> registry = LoggerRegistry()
    >>> get_logger('svc', registry=registry) is get_logger('svc', registry=registry)
    True
    >>> get_logger('svc', registry=registry) is get_logger('other', registry=registry)
    False
    """

    target = registry if registry is not None else default_registry()

    def _create() -> Logger:
        return Logger(
            name,
            level=env_level() if level is None else level,
            async_=env_async() if async_ is None else async_,
        )

    return target.get_or_create(name, _create)


__all__ = ["LoggerRegistry", "default_registry", "get_logger"]
