"""Caller-owned runtime object returned by :func:`open_runtime`."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from lib_log_rolling.adapters.rolling_file import RollingFileAppender
from lib_log_rolling.application.ports import AppenderPort
from lib_log_rolling.application.use_cases import ProcessPipeline
from lib_log_rolling.domain import LogEvent, LogLevel

from ._settings import RollingFileSettings

logger = logging.getLogger(__name__)

LifecycleObserver = Callable[[str, "LoggingRuntime"], None]


class LoggingRuntime:
    """Live appender stack plus the callables driving it.

    Several runtimes may coexist; nothing is registered globally. Lifecycle
    observers receive ``("shutting_down", runtime)`` before the appenders are
    closed and ``("shutdown", runtime)`` afterwards, in registration order.
    """

    def __init__(
        self,
        *,
        settings: RollingFileSettings,
        appenders: tuple[AppenderPort, ...],
        rolling_appender: RollingFileAppender,
        process: ProcessPipeline,
        shutdown_callable: Callable[[], list[str]],
    ) -> None:
        self.settings = settings
        self.appenders = appenders
        self.rolling_appender = rolling_appender
        self._process = process
        self._shutdown_callable = shutdown_callable
        self._observers: list[LifecycleObserver] = []
        self._lock = threading.RLock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def log(
        self,
        logger_name: str,
        level: LogLevel | str,
        message: str,
        *,
        exc_info: str | None = None,
        properties: Mapping[str, Any] | None = None,
        **metadata: Any,
    ) -> dict[str, Any]:
        """Create an event stamped with the current UTC time and append it everywhere."""

        if self._closed:
            return {"ok": False, "reason": "runtime_closed"}
        resolved = LogLevel.from_name(level) if isinstance(level, str) else level
        return self._process(
            logger_name=logger_name,
            level=resolved,
            message=message,
            exc_info=exc_info,
            properties=properties,
            **metadata,
        )

    def append(self, event: LogEvent) -> dict[str, Any]:
        """Hand a caller-built ``event`` to every appender."""

        if self._closed:
            return {"ok": False, "reason": "runtime_closed"}
        return self._process.dispatch(event)

    def subscribe(self, observer: LifecycleObserver) -> None:
        with self._lock:
            if observer not in self._observers:
                self._observers.append(observer)

    def unsubscribe(self, observer: LifecycleObserver) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def shutdown(self) -> list[str]:
        """Close every appender once; returns the names whose close failed."""

        with self._lock:
            if self._closed:
                return []
            self._notify("shutting_down")
            failures = self._shutdown_callable()
            self._closed = True
            self._notify("shutdown")
            return failures

    def __enter__(self) -> "LoggingRuntime":
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()

    def _notify(self, stage: str) -> None:
        for observer in list(self._observers):
            try:
                observer(stage, self)
            except Exception as exc:  # noqa: BLE001
                logger.error("Lifecycle observer raised during %s", stage, exc_info=exc)


__all__ = ["LifecycleObserver", "LoggingRuntime"]
