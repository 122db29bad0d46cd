"""Environment-driven configuration for registry-backed loggers.

Purpose
-------
Resolve the defaults :func:`lib_log_dispatch.get_logger` applies when callers
omit ``level``/``async_``, and optionally hydrate the environment from the
nearest ``.env`` file.

Contents
--------
* :func:`env_level` / :func:`env_async` - ``LOG_LEVEL`` / ``LOG_ASYNC`` lookups
  that fall back to the built-in defaults on invalid values.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - ``.env`` support built on
  ``python-dotenv``.

System Role
-----------
Outer-layer helper. Directly constructed :class:`~lib_log_dispatch.Logger`
instances never consult the environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv

from lib_log_dispatch.domain.levels import INFO, Level


LOGGER = logging.getLogger(__name__)

LEVEL_ENV_VAR = "LOG_LEVEL"
ASYNC_ENV_VAR = "LOG_ASYNC"
DOTENV_ENV_VAR = "LOG_USE_DOTENV"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_dotenv_loaded: bool = False
_dotenv_path: Path | None = None


def _env_bool(value: str | None, default: bool) -> bool:
    """Interpret ``value`` as a boolean flag with fallback.

    Examples
    --------
    >>> _env_bool('Yes', False)
    True
    >>> _env_bool(None, True)
    True
    >>> _env_bool('maybe', False)
    Traceback (most recent call last):
    ...
    ValueError: Invalid boolean value: 'maybe'
    """
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def env_level(environ: Mapping[str, str] | None = None) -> Level:
    """Return the ``LOG_LEVEL`` threshold, ``INFO`` when unset or invalid.

    Invalid names are reported with a warning instead of an exception.

    Examples
    --------
    >>> env_level({'LOG_LEVEL': 'Error'}).name
    'error'
    >>> env_level({'LOG_LEVEL': 'verbose'}).name
    'info'
    """
    env = os.environ if environ is None else environ
    raw = env.get(LEVEL_ENV_VAR)
    if raw is None or not raw.strip():
        return INFO
    try:
        return Level.from_name(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s", LEVEL_ENV_VAR, raw, INFO.name)
        return INFO


def env_async(environ: Mapping[str, str] | None = None) -> bool:
    """Return the ``LOG_ASYNC`` flag, ``False`` when unset or invalid."""
    env = os.environ if environ is None else environ
    raw = env.get(ASYNC_ENV_VAR)
    try:
        return _env_bool(raw, False)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using synchronous delivery", ASYNC_ENV_VAR, raw)
        return False


def should_use_dotenv(*, explicit: bool | None, env_value: str | None) -> bool:
    """Decide whether ``.env`` loading applies; an explicit flag wins.

    Examples
    --------
    >>> should_use_dotenv(explicit=None, env_value='1')
    True
    >>> should_use_dotenv(explicit=False, env_value='1')
    False
    """
    if explicit is not None:
        return explicit
    return _env_bool(env_value, False)


def enable_dotenv() -> Path | None:
    """Load the nearest ``.env`` into :data:`os.environ` once per process.

    The file is searched from the current working directory upwards.
    Existing environment variables keep precedence over file entries. Returns
    the loaded file, or ``None`` when no file was found.
    """
    global _dotenv_loaded, _dotenv_path
    if _dotenv_loaded:
        return _dotenv_path
    found = find_dotenv(usecwd=True)
    path = Path(found).resolve() if found else None
    if path is not None:
        load_dotenv(path, override=False)
    _dotenv_loaded = True
    _dotenv_path = path
    return path


def _reset_dotenv_state_for_testing() -> None:
    global _dotenv_loaded, _dotenv_path
    _dotenv_loaded = False
    _dotenv_path = None


__all__ = [
    "ASYNC_ENV_VAR",
    "DOTENV_ENV_VAR",
    "LEVEL_ENV_VAR",
    "enable_dotenv",
    "env_async",
    "env_level",
    "should_use_dotenv",
]
