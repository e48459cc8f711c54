"""Protocols separating the application layer from concrete adapters."""

from __future__ import annotations

from .appender import AppenderPort
from .error_handler import ErrorHandlerPort
from .layout import LayoutPort
from .locking import LockingModelPort
from .queue import QueuePort
from .time import ClockPort

__all__ = [
    "AppenderPort",
    "ClockPort",
    "ErrorHandlerPort",
    "LayoutPort",
    "LockingModelPort",
    "QueuePort",
]
