"""Error handler that reports the first failure and swallows the rest.

Purpose
-------
Appenders run inside the host application's code path, so their failures must
never propagate. A broken disk would otherwise flood ``stderr`` with one report
per log call; the handler therefore reports only the first error unless
internal debugging is switched on.

Contents
--------
* :class:`OnlyOnceErrorHandler` – implementation of :class:`ErrorHandlerPort`.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from lib_log_rolling.application.ports.error_handler import ErrorHandlerPort
from lib_log_rolling.domain.errors import ErrorCode

from . import diagnostics


class OnlyOnceErrorHandler(ErrorHandlerPort):
    """Record and report the first error; later errors are dropped.

    Examples
    --------
    >>> handler = OnlyOnceErrorHandler('rolling: ')
    >>> handler.is_enabled
    True
    >>> handler.error('disk full', code=ErrorCode.WRITE_FAILURE)
    >>> handler.is_enabled, handler.error_code, handler.error_message
    (False, <ErrorCode.WRITE_FAILURE: 1>, 'disk full')
    >>> handler.reset()
    >>> handler.is_enabled
    True
    """

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix
        self._lock = threading.Lock()
        self._first_time = True
        self._enabled_at: datetime | None = None
        self._message: str | None = None
        self._exception: BaseException | None = None
        self._code = ErrorCode.GENERIC_FAILURE

    def error(
        self,
        message: str,
        exc: BaseException | None = None,
        code: ErrorCode = ErrorCode.GENERIC_FAILURE,
    ) -> None:
        with self._lock:
            first = self._first_time
            if first:
                self._first_time = False
                self._enabled_at = datetime.now(timezone.utc)
                self._message = message
                self._exception = exc
                self._code = code
        if first or diagnostics.internal_debugging_enabled():
            diagnostics.error("[%s] %s%s", code.name, self.prefix, message, exc=exc)

    def reset(self) -> None:
        """Re-arm the handler so the next error is reported again."""

        with self._lock:
            self._first_time = True
            self._enabled_at = None
            self._message = None
            self._exception = None
            self._code = ErrorCode.GENERIC_FAILURE

    @property
    def is_enabled(self) -> bool:
        """``True`` until the first error has been recorded."""

        return self._first_time

    @property
    def enabled_at(self) -> datetime | None:
        """UTC time of the recorded error."""

        return self._enabled_at

    @property
    def error_message(self) -> str | None:
        return self._message

    @property
    def exception(self) -> BaseException | None:
        return self._exception

    @property
    def error_code(self) -> ErrorCode:
        return self._code


__all__ = ["OnlyOnceErrorHandler"]
