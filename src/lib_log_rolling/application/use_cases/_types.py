"""Shared typing helpers for the application use cases."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

ProcessResult = dict[str, Any]
DiagnosticHook = Callable[[str, dict[str, Any]], None]

__all__ = ["DiagnosticHook", "ProcessResult"]
