"""Click command group exposing metadata and small pattern/rollover tools.

Purpose
-------
Give operators a quick way to check a conversion pattern, expand a file-name
pattern, or watch a size-based rollover happen in a scratch directory without
writing any host code.

Contents
--------
* :func:`cli` – root group (``--use-dotenv``, ``--traceback``).
* Commands: ``info``, ``render``, ``expand``, ``roll-demo``.
* :func:`main` – entry point delegating to :func:`lib_cli_exit_tools.run_cli`.

System Role
-----------
Presentation layer; it only composes public adapters and never touches the
runtime internals.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

import click
import lib_cli_exit_tools
from click.core import ParameterSource
from rich.console import Console
from rich.table import Table

from . import __init__conf__
from . import config as log_config
from .adapters import PatternLayout, PatternString, RollingFileAppender
from .domain import LogEvent, LogLevel, RollingStyle, parse_file_size

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_LEVEL_CHOICES = [level.name for level in LogLevel]
_STYLE_CHOICES = [style.value for style in RollingStyle]


def summary_info() -> str:
    """Return the metadata banner printed by ``info``.

    Examples
    --------
    >>> summary_info().startswith('Info for lib_log_rolling')
    True
    """

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


def _explicit_flag(ctx: click.Context, name: str, value: bool) -> bool | None:
    if ctx.get_parameter_source(name) is ParameterSource.COMMANDLINE:
        return value
    return None


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(
    version=__init__conf__.version,
    prog_name=__init__conf__.shell_command,
    message=f"{__init__conf__.shell_command} version {__init__conf__.version}",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=False,
    help=f"Load LOG_ROLLING_* settings from the nearest .env (overrides {log_config.DOTENV_ENV_VAR}).",
)
@click.option(
    "--traceback/--no-traceback",
    default=False,
    help="Show full Python tracebacks on errors.",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool, traceback: bool) -> None:
    """Rolling file logging tools."""

    explicit_dotenv = _explicit_flag(ctx, "use_dotenv", use_dotenv)
    if log_config.should_use_dotenv(explicit=explicit_dotenv, env_value=os.environ.get(log_config.DOTENV_ENV_VAR)):
        log_config.enable_dotenv()

    explicit_traceback = _explicit_flag(ctx, "traceback", traceback)
    if explicit_traceback is not None:
        lib_cli_exit_tools.config.traceback = explicit_traceback
        lib_cli_exit_tools.config.traceback_force_color = explicit_traceback

    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("render", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("pattern")
@click.argument("message")
@click.option("--level", type=click.Choice(_LEVEL_CHOICES, case_sensitive=False), default="INFO", show_default=True)
@click.option("--logger", "logger_name", default="demo", show_default=True, help="Logger name of the sample event.")
@click.option("--property", "properties", multiple=True, metavar="KEY=VALUE", help="Event property; repeatable.")
@click.option("--json", "as_json", is_flag=True, help="Print the sample event as JSON instead of rendering it.")
def cli_render(
    pattern: str, message: str, level: str, logger_name: str, properties: tuple[str, ...], as_json: bool
) -> None:
    """Render MESSAGE through the conversion PATTERN once."""

    layout = PatternLayout(pattern)
    event = LogEvent(
        timestamp=datetime.now(timezone.utc),
        logger_name=logger_name,
        level=LogLevel.from_name(level),
        message=message,
        properties=_parse_properties(properties),
    )
    if as_json:
        click.echo(event.to_json())
        return
    click.echo(layout.render(event), nl=False)


@cli.command("expand", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("pattern")
@click.option("--property", "properties", multiple=True, metavar="KEY=VALUE", help="Pattern property; repeatable.")
def cli_expand(pattern: str, properties: tuple[str, ...]) -> None:
    """Expand a file-name PATTERN (``%date``, ``%env{NAME}``, ``%property{key}`` ...)."""

    click.echo(PatternString(pattern, properties=_parse_properties(properties)).format())


@cli.command("roll-demo", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Target directory (a fresh temporary directory when omitted).",
)
@click.option("--style", type=click.Choice(_STYLE_CHOICES, case_sensitive=False), default="size", show_default=True)
@click.option("--max-size", default="1KB", show_default=True, help="Size trigger, e.g. 512, 10KB, 1MB.")
@click.option("--backups", type=int, default=3, show_default=True, help="Backups to keep (0 keeps all).")
@click.option("--lines", type=click.IntRange(min=1), default=100, show_default=True, help="Sample events to append.")
def cli_roll_demo(directory: Path | None, style: str, max_size: str, backups: int, lines: int) -> None:
    """Append sample events to a rolling file and list the resulting files."""

    try:
        parse_file_size(max_size)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--max-size") from exc

    target = directory if directory is not None else Path(tempfile.mkdtemp(prefix="lib_log_rolling-"))
    target.mkdir(parents=True, exist_ok=True)
    appender = RollingFileAppender(
        name="roll-demo",
        file=str(target / "demo.log"),
        rolling_style=style,
        maximum_file_size=max_size,
        max_size_roll_backups=backups,
        layout=PatternLayout("%utcdate{ISO8601} [%-5level] %logger - %message%newline"),
    )
    appender.activate_options()
    try:
        for index in range(lines):
            appender.append(
                LogEvent(
                    timestamp=datetime.now(timezone.utc),
                    logger_name="roll.demo",
                    level=LogLevel.INFO,
                    message=f"sample event {index:05d}",
                )
            )
    finally:
        appender.close()

    table = Table(title=f"Files in {target}")
    table.add_column("file")
    table.add_column("bytes", justify="right")
    for path in sorted(target.iterdir()):
        if path.is_file():
            table.add_row(path.name, str(path.stat().st_size))
    Console().print(table)


def _parse_properties(pairs: Sequence[str]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--property")
        parsed[key.strip()] = value
    return parsed


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI through :func:`lib_cli_exit_tools.run_cli` and return its exit code.

    The traceback preferences touched by ``--traceback`` are restored
    afterwards so embedding callers keep their own settings.
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
        lib_cli_exit_tools.config.traceback = previous_traceback
        lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "main", "summary_info"]
