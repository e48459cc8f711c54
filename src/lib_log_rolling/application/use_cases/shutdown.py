"""Shutdown orchestration for the appender stack.

Purpose
-------
Close every appender in registration order so wrappers drain their queues and
buffers before file handles are released.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from lib_log_rolling.application.ports import AppenderPort

logger = logging.getLogger(__name__)


def create_shutdown(*, appenders: Sequence[AppenderPort]) -> Callable[[], list[str]]:
    """Return a callable performing the shutdown sequence.

    The callable returns the names of appenders whose ``close`` raised; the
    remaining appenders are still closed.
    """

    destinations = tuple(appenders)

    def shutdown() -> list[str]:
        """Close appenders, collecting failures instead of stopping early."""
        failures: list[str] = []
        for appender in destinations:
            try:
                appender.close()
            except Exception as exc:  # noqa: BLE001
                name = getattr(appender, "name", type(appender).__name__)
                logger.error("Appender %s failed to close", name, exc_info=exc)
                failures.append(name)
        return failures

    return shutdown


__all__ = ["create_shutdown"]
