"""Port for the error sink that absorbs appender failures."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_rolling.domain.errors import ErrorCode


@runtime_checkable
class ErrorHandlerPort(Protocol):
    """Receive failures that must not escape into the caller's code path."""

    def error(
        self,
        message: str,
        exc: BaseException | None = None,
        code: ErrorCode = ErrorCode.GENERIC_FAILURE,
    ) -> None:
        """Record or report the failure described by ``message``."""


__all__ = ["ErrorHandlerPort"]
