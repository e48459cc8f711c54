"""Public package surface for the rolling file logging core.

Host applications usually need only :func:`open_runtime` plus the settings
helpers; the appender, layout and buffer building blocks are re-exported for
callers composing their own stacks.
"""

from __future__ import annotations

from .adapters import (
    AsyncForwardingAppender,
    BufferingForwardingAppender,
    CountingQuietTextWriter,
    FileAppender,
    OnlyOnceErrorHandler,
    PatternLayout,
    PatternString,
    QuietTextWriter,
    RichConsoleAppender,
    RollingFileAppender,
)
from .domain import CyclicBuffer, ErrorCode, LogEvent, LogLevel, RollingStyle
from .runtime import LoggingRuntime, RollingFileSettings, build_rolling_settings, open_runtime

__all__ = [
    "AsyncForwardingAppender",
    "BufferingForwardingAppender",
    "CountingQuietTextWriter",
    "CyclicBuffer",
    "ErrorCode",
    "FileAppender",
    "LogEvent",
    "LogLevel",
    "LoggingRuntime",
    "OnlyOnceErrorHandler",
    "PatternLayout",
    "PatternString",
    "QuietTextWriter",
    "RichConsoleAppender",
    "RollingFileAppender",
    "RollingFileSettings",
    "RollingStyle",
    "build_rolling_settings",
    "open_runtime",
]
