"""Settings for the rolling runtime: keyword arguments plus environment overrides.

Purpose
-------
Collect every knob of the default appender stack in one frozen value object.
Environment variables (``LOG_ROLLING_*``) override the keyword arguments so an
operator can reconfigure a deployed service without touching code.

Contents
--------
* :class:`RollingFileSettings` – frozen configuration record.
* :func:`build_rolling_settings` – merge arguments with the environment.
* :data:`ENV_PREFIX` and the per-field variable names.

System Role
-----------
Input of :func:`lib_log_rolling.runtime.open_runtime`. Invalid values raise
:class:`ValueError` naming the offending variable.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from lib_log_rolling.domain.levels import LogLevel
from lib_log_rolling.domain.rolling import RollingStyle, parse_file_size

ENV_PREFIX = "LOG_ROLLING_"

DEFAULT_PATTERN = "%utcdate{ISO8601} [%-5level] %logger - %message%newline"

T = TypeVar("T")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class RollingFileSettings:
    """Resolved configuration of the default appender stack.

    ``max_backups <= 0`` keeps every backup. ``buffer_size <= 1`` disables
    the buffering wrapper.
    """

    file: str
    rolling_style: RollingStyle = RollingStyle.COMPOSITE
    date_pattern: str = ".yyyy-MM-dd"
    max_file_size: int = 10 * 1024 * 1024
    max_backups: int = 0
    count_direction: int = -1
    static_name: bool = True
    preserve_extension: bool = False
    append: bool = True
    pattern: str = DEFAULT_PATTERN
    locking: str = "exclusive"
    encoding: str = "utf-8"
    clock: str = "local"
    level: LogLevel = LogLevel.DEBUG
    console: bool = False
    buffer_size: int = 0
    async_enabled: bool = False


def _parse_bool(name: str, raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag (1/0, true/false), got {raw!r}")


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _wrap(name: str, parser: Callable[[str], T]) -> Callable[[str], T]:
    def parse(raw: str) -> T:
        try:
            return parser(raw)
        except ValueError as exc:
            raise ValueError(f"{name}: {exc}") from exc

    return parse


def _choice(name: str, allowed: set[str]) -> Callable[[str], str]:
    def parse(raw: str) -> str:
        normalized = raw.strip().lower()
        if normalized not in allowed:
            raise ValueError(f"{name} must be one of {sorted(allowed)}, got {raw!r}")
        return normalized

    return parse


def _field_parsers() -> dict[str, tuple[str, Callable[[str], Any]]]:
    def var(suffix: str) -> str:
        return ENV_PREFIX + suffix

    return {
        "file": (var("FILE"), str.strip),
        "rolling_style": (var("ROLLING_STYLE"), _wrap(var("ROLLING_STYLE"), RollingStyle.from_name)),
        "date_pattern": (var("DATE_PATTERN"), str),
        "max_file_size": (var("MAX_FILE_SIZE"), _wrap(var("MAX_FILE_SIZE"), parse_file_size)),
        "max_backups": (var("MAX_BACKUPS"), lambda raw: _parse_int(var("MAX_BACKUPS"), raw)),
        "count_direction": (var("COUNT_DIRECTION"), lambda raw: _parse_int(var("COUNT_DIRECTION"), raw)),
        "static_name": (var("STATIC_NAME"), lambda raw: _parse_bool(var("STATIC_NAME"), raw)),
        "preserve_extension": (var("PRESERVE_EXTENSION"), lambda raw: _parse_bool(var("PRESERVE_EXTENSION"), raw)),
        "append": (var("APPEND"), lambda raw: _parse_bool(var("APPEND"), raw)),
        "pattern": (var("PATTERN"), str),
        "locking": (var("LOCKING"), _choice(var("LOCKING"), {"exclusive", "minimal", "interprocess"})),
        "encoding": (var("ENCODING"), str.strip),
        "clock": (var("CLOCK"), _choice(var("CLOCK"), {"local", "utc"})),
        "level": (var("LEVEL"), _wrap(var("LEVEL"), LogLevel.from_name)),
        "console": (var("CONSOLE"), lambda raw: _parse_bool(var("CONSOLE"), raw)),
        "buffer_size": (var("BUFFER_SIZE"), lambda raw: _parse_int(var("BUFFER_SIZE"), raw)),
        "async_enabled": (var("ASYNC"), lambda raw: _parse_bool(var("ASYNC"), raw)),
    }


def _coerce_argument(field: str, value: Any) -> Any:
    if field == "rolling_style" and isinstance(value, str):
        return RollingStyle.from_name(value)
    if field == "max_file_size":
        return parse_file_size(value)
    if field == "level" and isinstance(value, str):
        return LogLevel.from_name(value)
    if field in {"locking", "clock"} and isinstance(value, str):
        return value.strip().lower()
    return value


def build_rolling_settings(*, environ: Mapping[str, str] | None = None, **arguments: Any) -> RollingFileSettings:
    """Merge keyword ``arguments`` with ``LOG_ROLLING_*`` overrides.

    Examples
    --------
    >>> settings = build_rolling_settings(file='app.log', environ={'LOG_ROLLING_MAX_FILE_SIZE': '10KB'})
    >>> settings.max_file_size
    10240
    >>> build_rolling_settings(file='app.log', environ={'LOG_ROLLING_APPEND': 'maybe'})
    Traceback (most recent call last):
    ...
    ValueError: LOG_ROLLING_APPEND must be a boolean flag (1/0, true/false), got 'maybe'
    """

    env = os.environ if environ is None else environ
    parsers = _field_parsers()
    unknown = set(arguments) - set(parsers)
    if unknown:
        raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")

    resolved: dict[str, Any] = {}
    for field, (variable, parser) in parsers.items():
        raw = env.get(variable)
        if raw is not None and raw.strip() != "":
            resolved[field] = parser(raw)
        elif arguments.get(field) is not None:
            resolved[field] = _coerce_argument(field, arguments[field])

    if not resolved.get("file"):
        raise ValueError(f"A log file is required (pass file=... or set {ENV_PREFIX}FILE)")
    return RollingFileSettings(**resolved)


__all__ = ["DEFAULT_PATTERN", "ENV_PREFIX", "RollingFileSettings", "build_rolling_settings"]
