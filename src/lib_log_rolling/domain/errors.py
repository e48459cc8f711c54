"""Error codes reported to error handlers."""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Classify failures routed to an :class:`ErrorHandlerPort`."""

    GENERIC_FAILURE = 0
    WRITE_FAILURE = 1
    FLUSH_FAILURE = 2
    CLOSE_FAILURE = 3
    FILE_OPEN_FAILURE = 4
    MISSING_LAYOUT = 5


__all__ = ["ErrorCode"]
