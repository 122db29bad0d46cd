"""Command-line adapter for metadata and a console demo of the dispatch core.

Purpose
-------
Offer ``lib_log_dispatch info`` and ``lib_log_dispatch logdemo`` so packaging
checks and humans can exercise the installed library.

Contents
--------
* :func:`cli` - Click group with traceback and dotenv toggles.
* :func:`summary_info` - metadata banner as a string.
* :func:`main` - runs the group through ``lib_cli_exit_tools``.

System Role
-----------
Presentation layer only; it composes a :class:`Logger` with a
:class:`RichConsoleHandler` exactly as host applications would.
"""

from __future__ import annotations

import os
from typing import Sequence

import click
import lib_cli_exit_tools

from . import __init__conf__
from . import config as log_config
from .adapters import MemoryHandler, RichConsoleHandler
from .domain.levels import BUILTIN_LEVELS, Level
from .logger import Logger

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_LEVEL_CHOICES = ["all", "debug", "info", "warning", "error", "fatal", "off"]


def summary_info() -> str:
    """Return the metadata banner printed by ``info``.

    Examples
    --------
    >>> "version" in summary_info()
    True
    """
    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


def _logdemo(*, level: str, async_: bool, no_color: bool) -> int:
    """Emit one record per built-in level and return how many were delivered."""

    logger = Logger("logdemo", level=Level.from_name(level), async_=async_)
    delivered = MemoryHandler()
    logger.add_handler(RichConsoleHandler(no_color=no_color))
    logger.add_handler(delivered)

    demo = logger.bind(demo="logdemo")
    with demo.trace("logdemo run"):
        for builtin in BUILTIN_LEVELS:
            demo.log(builtin, f"{builtin.severity} sample record")
    logger.close().result()
    return len(delivered)


@click.group(
    help=__init__conf__.title,
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load environment variables from the nearest .env (also via {log_config.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool) -> None:
    """Root command storing global flags."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback

    explicit: bool | None = None
    if ctx.get_parameter_source("use_dotenv") is not click.core.ParameterSource.DEFAULT:
        explicit = use_dotenv
    if log_config.should_use_dotenv(explicit=explicit, env_value=os.getenv(log_config.DOTENV_ENV_VAR)):
        log_config.enable_dotenv()

    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print resolved metadata so users can inspect installation details."""

    click.echo(summary_info(), nl=False)


@cli.command("logdemo", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--level",
    type=click.Choice(_LEVEL_CHOICES, case_sensitive=False),
    default="debug",
    show_default=True,
    help="Threshold of the demo logger.",
)
@click.option("--async", "async_", is_flag=True, help="Deliver records from a background worker.")
@click.option("--no-color", is_flag=True, help="Render without colour.")
def cli_logdemo(level: str, async_: bool, no_color: bool) -> None:
    """Emit sample records at every built-in level to the console."""

    emitted = _logdemo(level=level, async_=async_, no_color=no_color)
    click.echo(f"emitted {emitted} records at threshold {level.lower()}")


def main(argv: Sequence[str] | None = None, *, restore_traceback: bool = True) -> int:
    """Run the CLI and return its exit code.

    Traceback preferences changed by ``--traceback`` are restored afterwards
    unless ``restore_traceback`` is ``False``.
    """

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main", "summary_info"]
