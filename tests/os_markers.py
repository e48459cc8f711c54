"""Reusable pytest markers describing which operating systems a test targets."""

from __future__ import annotations

import sys

import pytest

OS_AGNOSTIC = pytest.mark.os_agnostic
POSIX_ONLY = [
    pytest.mark.posix_only,
    pytest.mark.skipif(sys.platform.startswith("win"), reason="relies on POSIX file semantics"),
]
WINDOWS_ONLY = [
    pytest.mark.windows_only,
    pytest.mark.skipif(not sys.platform.startswith("win"), reason="relies on Windows file semantics"),
]

__all__ = ["OS_AGNOSTIC", "POSIX_ONLY", "WINDOWS_ONLY"]
