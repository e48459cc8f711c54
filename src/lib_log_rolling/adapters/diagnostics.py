"""Internal diagnostic channel for the logging core itself.

Purpose
-------
A logging library cannot log its own failures through the appenders that are
failing. Problems are reported on a dedicated stdlib logger instead, which the
host application can route anywhere (by default Python prints warnings and
errors of unconfigured loggers to ``stderr``).

Contents
--------
* :data:`INTERNAL_LOGGER_NAME` – ``"lib_log_rolling.internal"``.
* :func:`enable_internal_debugging` / :func:`disable_internal_debugging` /
  :func:`internal_debugging_enabled`.
* :func:`debug`, :func:`warn`, :func:`error` – emission helpers.

System Role
-----------
Used by the error handler, the pattern parser callback and the rolling
appender to narrate rollovers when debugging is switched on.
"""

from __future__ import annotations

import logging
import os

INTERNAL_LOGGER_NAME = "lib_log_rolling.internal"
INTERNAL_DEBUG_ENV_VAR = "LOG_ROLLING_INTERNAL_DEBUG"

LOGGER = logging.getLogger(INTERNAL_LOGGER_NAME)

_TRUTHY = {"1", "true", "yes", "on"}
_debug_override: bool | None = None


def enable_internal_debugging() -> None:
    """Emit debug narration and report every handled error."""

    global _debug_override
    _debug_override = True


def disable_internal_debugging() -> None:
    """Restore the default behaviour (and ignore the environment toggle)."""

    global _debug_override
    _debug_override = False


def reset_internal_debugging() -> None:
    """Forget explicit toggles so :data:`INTERNAL_DEBUG_ENV_VAR` decides again."""

    global _debug_override
    _debug_override = None


def internal_debugging_enabled() -> bool:
    """Return ``True`` when internal debug output is active."""

    if _debug_override is not None:
        return _debug_override
    return os.getenv(INTERNAL_DEBUG_ENV_VAR, "").strip().lower() in _TRUTHY


def debug(message: str, *args: object) -> None:
    if internal_debugging_enabled():
        LOGGER.debug(message, *args)


def warn(message: str, *args: object) -> None:
    LOGGER.warning(message, *args)


def error(message: str, *args: object, exc: BaseException | None = None) -> None:
    LOGGER.error(message, *args, exc_info=exc)


__all__ = [
    "INTERNAL_DEBUG_ENV_VAR",
    "INTERNAL_LOGGER_NAME",
    "debug",
    "disable_internal_debugging",
    "enable_internal_debugging",
    "error",
    "internal_debugging_enabled",
    "reset_internal_debugging",
    "warn",
]
