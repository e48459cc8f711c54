from __future__ import annotations

import os
from datetime import datetime

import pytest

from lib_log_rolling.domain.rolling import (
    RollingStyle,
    RollPoint,
    combine_path,
    compute_check_period,
    next_check_date,
    parse_file_size,
)
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


@pytest.mark.parametrize(
    "pattern, expected",
    [
        (".yyyy-MM-dd-HH-mm", RollPoint.TOP_OF_MINUTE),
        (".yyyy-MM-dd-HH", RollPoint.TOP_OF_HOUR),
        (".yyyy-MM-dd-tt", RollPoint.HALF_DAY),
        (".yyyy-MM-dd", RollPoint.TOP_OF_DAY),
        (".yyyy-MM", RollPoint.TOP_OF_MONTH),
        ("'fixed'", RollPoint.INVALID),
    ],
)
def test_compute_check_period_picks_finest_changing_unit(pattern: str, expected: RollPoint) -> None:
    assert compute_check_period(pattern) is expected


@pytest.mark.parametrize(
    "current, point, expected",
    [
        (datetime(2025, 3, 7, 14, 5, 9, 42), RollPoint.TOP_OF_MINUTE, datetime(2025, 3, 7, 14, 6)),
        (datetime(2025, 3, 7, 23, 59, 59), RollPoint.TOP_OF_HOUR, datetime(2025, 3, 8, 0, 0)),
        (datetime(2025, 3, 7, 9, 30), RollPoint.HALF_DAY, datetime(2025, 3, 7, 12, 0)),
        (datetime(2025, 3, 7, 12, 0), RollPoint.HALF_DAY, datetime(2025, 3, 8, 0, 0)),
        (datetime(2025, 2, 28, 18, 0), RollPoint.TOP_OF_DAY, datetime(2025, 3, 1, 0, 0)),
        (datetime(2025, 3, 7, 18, 0), RollPoint.TOP_OF_WEEK, datetime(2025, 3, 9, 0, 0)),
        (datetime(2025, 3, 9, 1, 0), RollPoint.TOP_OF_WEEK, datetime(2025, 3, 16, 0, 0)),
        (datetime(2025, 12, 31, 23, 0), RollPoint.TOP_OF_MONTH, datetime(2026, 1, 1, 0, 0)),
    ],
)
def test_next_check_date_returns_start_of_following_period(current: datetime, point: RollPoint, expected: datetime) -> None:
    assert next_check_date(current, point) == expected


def test_next_check_date_is_always_after_current() -> None:
    current = datetime(2025, 3, 7, 14, 5, 9)
    for point in RollPoint:
        if point is RollPoint.INVALID:
            continue
        assert next_check_date(current, point) > current


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1", 1),
        ("10KB", 10 * 1024),
        ("10kb", 10 * 1024),
        ("5 MB", 5 * 1024 * 1024),
        ("1GB", 1024**3),
        (4096, 4096),
    ],
)
def test_parse_file_size_accepts_units(value: str | int, expected: int) -> None:
    assert parse_file_size(value) == expected


@pytest.mark.parametrize("value", ["", "ten", "10TB", "-1", "0", 0, -3])
def test_parse_file_size_rejects_invalid_values(value: str | int) -> None:
    with pytest.raises(ValueError):
        parse_file_size(value)


def test_combine_path_preserves_extension_on_request() -> None:
    path = os.path.join("logs", "app.log")
    assert combine_path(path, ".2025-03-07", preserve_extension=False) == os.path.join("logs", "app.log.2025-03-07")
    assert combine_path(path, ".2025-03-07", preserve_extension=True) == os.path.join("logs", "app.2025-03-07.log")


def test_combine_path_without_extension_appends_suffix() -> None:
    assert combine_path("app", ".1", preserve_extension=True) == "app.1"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("size", RollingStyle.SIZE),
        ("Date", RollingStyle.DATE),
        ("COMPOSITE", RollingStyle.COMPOSITE),
        ("none", RollingStyle.NONE),
        ("once", RollingStyle.NONE),
    ],
)
def test_rolling_style_from_name(name: str, expected: RollingStyle) -> None:
    assert RollingStyle.from_name(name) is expected


def test_rolling_style_rejects_unknown_name() -> None:
    with pytest.raises(ValueError, match="Unsupported rolling style"):
        RollingStyle.from_name("hourly")


def test_rolling_style_trigger_flags() -> None:
    assert RollingStyle.COMPOSITE.rolls_by_date and RollingStyle.COMPOSITE.rolls_by_size
    assert RollingStyle.SIZE.rolls_by_size and not RollingStyle.SIZE.rolls_by_date
    assert RollingStyle.DATE.rolls_by_date and not RollingStyle.DATE.rolls_by_size
    assert not RollingStyle.NONE.rolls_by_date and not RollingStyle.NONE.rolls_by_size
