"""Runtime façade: build a caller-owned logging stack from settings.

Purpose
-------
Give host applications one entry point that turns configuration (keyword
arguments plus ``LOG_ROLLING_*`` environment overrides) into a working
appender stack, without reaching into the inner layers.

Contents
--------
* :func:`open_runtime` – composition root returning :class:`LoggingRuntime`.
* :class:`RollingFileSettings` / :func:`build_rolling_settings` – configuration.

System Role
-----------
Outer shell of the clean-architecture layering. There is no process-wide
singleton: the caller owns the returned runtime and must call
:meth:`LoggingRuntime.shutdown` (or use it as a context manager).
"""

from __future__ import annotations

from typing import Any

from ._composition import DiagnosticHook, build_rolling_appender, build_runtime
from ._settings import DEFAULT_PATTERN, ENV_PREFIX, RollingFileSettings, build_rolling_settings
from ._state import LifecycleObserver, LoggingRuntime


def open_runtime(
    settings: RollingFileSettings | None = None,
    *,
    diagnostic: DiagnosticHook = None,
    **arguments: Any,
) -> LoggingRuntime:
    """Compose and activate the appender stack.

    Parameters
    ----------
    settings:
        Pre-built settings; when omitted they are built from ``arguments``
        via :func:`build_rolling_settings` (environment overrides apply).
    diagnostic:
        Optional hook receiving ``(name, payload)`` pipeline milestones.

    Raises
    ------
    ValueError
        Invalid configuration.
    OSError
        The log file could not be created.

    Examples
    --------
    >>> import os, tempfile
    >>> path = os.path.join(tempfile.mkdtemp(), 'app.log')
    >>> with open_runtime(file=path, pattern='%level %message%newline', environ={}) as runtime:
    ...     runtime.log('svc', 'INFO', 'hello')['ok']
    True
    >>> open(path, encoding='utf-8').read().strip()
    'INFO hello'
    """

    resolved = settings if settings is not None else build_rolling_settings(**arguments)
    return build_runtime(resolved, diagnostic=diagnostic)


__all__ = [
    "DEFAULT_PATTERN",
    "ENV_PREFIX",
    "LifecycleObserver",
    "LoggingRuntime",
    "RollingFileSettings",
    "build_rolling_appender",
    "build_rolling_settings",
    "open_runtime",
]
