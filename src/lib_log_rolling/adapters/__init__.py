"""Adapters implementing the application ports."""

from __future__ import annotations

from .appender_base import AppenderSkeleton
from .async_forwarding import AsyncForwardingAppender
from .buffering import BufferingForwardingAppender, level_evaluator
from .clock import LocalClock, UniversalClock, clock_from_name
from .console import RichConsoleAppender
from .diagnostics import disable_internal_debugging, enable_internal_debugging, internal_debugging_enabled
from .error_handler import OnlyOnceErrorHandler
from .file_appender import FileAppender
from .locking import ExclusiveLock, InterProcessLock, LockingStream, MinimalLock, locking_model_from_name
from .pattern import PatternLayout, PatternString
from .queue import QueueAdapter
from .rolling_file import RollingFileAppender
from .writers import CountingQuietTextWriter, QuietTextWriter

__all__ = [
    "AppenderSkeleton",
    "AsyncForwardingAppender",
    "BufferingForwardingAppender",
    "CountingQuietTextWriter",
    "ExclusiveLock",
    "FileAppender",
    "InterProcessLock",
    "LocalClock",
    "LockingStream",
    "MinimalLock",
    "OnlyOnceErrorHandler",
    "PatternLayout",
    "PatternString",
    "QueueAdapter",
    "QuietTextWriter",
    "RichConsoleAppender",
    "RollingFileAppender",
    "UniversalClock",
    "clock_from_name",
    "disable_internal_debugging",
    "enable_internal_debugging",
    "internal_debugging_enabled",
    "level_evaluator",
    "locking_model_from_name",
]
