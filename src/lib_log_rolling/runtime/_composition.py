"""Composition helpers assembling the appender stack from settings.

The stack is built inside out: the rolling file appender first, optionally
wrapped by a buffering appender, optionally wrapped by an async fan-out
appender; the Rich console appender sits next to it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from lib_log_rolling.adapters import (
    AsyncForwardingAppender,
    BufferingForwardingAppender,
    PatternLayout,
    RichConsoleAppender,
    RollingFileAppender,
    UniversalClock,
    clock_from_name,
    locking_model_from_name,
)
from lib_log_rolling.application.ports import AppenderPort
from lib_log_rolling.application.use_cases import create_process_log_event, create_shutdown

from ._settings import RollingFileSettings
from ._state import LoggingRuntime

DiagnosticHook = Callable[[str, dict[str, Any]], None] | None


def build_rolling_appender(settings: RollingFileSettings) -> RollingFileAppender:
    """Create and activate the rolling file appender described by ``settings``."""

    appender = RollingFileAppender(
        name="rolling-file",
        file=settings.file,
        append_to_file=settings.append,
        rolling_style=settings.rolling_style,
        date_pattern=settings.date_pattern,
        maximum_file_size=settings.max_file_size,
        max_size_roll_backups=settings.max_backups,
        count_direction=settings.count_direction,
        static_log_file_name=settings.static_name,
        preserve_log_file_name_extension=settings.preserve_extension,
        encoding=settings.encoding,
        locking_model=locking_model_from_name(settings.locking),
        clock=clock_from_name(settings.clock),
        layout=PatternLayout(settings.pattern),
        threshold=settings.level,
    )
    appender.activate_options()
    return appender


def _wrap_file_appender(
    rolling: RollingFileAppender,
    settings: RollingFileSettings,
    diagnostic: DiagnosticHook,
) -> AppenderPort:
    outermost: AppenderPort = rolling
    if settings.buffer_size > 1:
        buffering = BufferingForwardingAppender([outermost], name="buffer", buffer_size=settings.buffer_size)
        buffering.activate_options()
        outermost = buffering
    if settings.async_enabled:
        forwarding = AsyncForwardingAppender([outermost], name="async", diagnostic=diagnostic)
        forwarding.activate_options()
        outermost = forwarding
    return outermost


def build_runtime(settings: RollingFileSettings, *, diagnostic: DiagnosticHook = None) -> LoggingRuntime:
    """Assemble the appenders and use cases into a :class:`LoggingRuntime`."""

    rolling = build_rolling_appender(settings)
    appenders: list[AppenderPort] = [_wrap_file_appender(rolling, settings, diagnostic)]
    if settings.console:
        console = RichConsoleAppender(name="console", layout=PatternLayout(settings.pattern), threshold=settings.level)
        console.activate_options()
        appenders.append(console)

    process = create_process_log_event(appenders=appenders, clock=UniversalClock(), diagnostic=diagnostic)
    shutdown = create_shutdown(appenders=appenders)
    return LoggingRuntime(
        settings=settings,
        appenders=tuple(appenders),
        rolling_appender=rolling,
        process=process,
        shutdown_callable=shutdown,
    )


__all__ = ["DiagnosticHook", "build_rolling_appender", "build_runtime"]
