"""Port for the file locking strategies used by file appenders."""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class LockingModelPort(Protocol):
    """Control when the underlying file handle is opened and released.

    ``acquire`` returns the byte stream to write to while the lock is held;
    ``release`` ends the critical section.
    """

    def open_file(self, filename: str, append: bool, encoding: str) -> None: ...

    def close_file(self) -> None: ...

    def acquire(self) -> BinaryIO | None: ...

    def release(self) -> None: ...


__all__ = ["LockingModelPort"]
