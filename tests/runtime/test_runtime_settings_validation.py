from __future__ import annotations

import pytest

from lib_log_rolling.domain.levels import LogLevel
from lib_log_rolling.domain.rolling import RollingStyle
from lib_log_rolling.runtime import DEFAULT_PATTERN, build_rolling_settings
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_defaults_apply_when_nothing_is_configured() -> None:
    settings = build_rolling_settings(file="app.log", environ={})

    assert settings.rolling_style is RollingStyle.COMPOSITE
    assert settings.date_pattern == ".yyyy-MM-dd"
    assert settings.max_file_size == 10 * 1024 * 1024
    assert settings.max_backups == 0
    assert settings.count_direction == -1
    assert settings.pattern == DEFAULT_PATTERN
    assert settings.level is LogLevel.DEBUG
    assert settings.async_enabled is False


def test_keyword_arguments_are_coerced() -> None:
    settings = build_rolling_settings(
        file="app.log",
        rolling_style="size",
        max_file_size="1MB",
        level="warning",
        locking="MINIMAL",
        clock=" UTC ",
        environ={},
    )

    assert settings.rolling_style is RollingStyle.SIZE
    assert settings.max_file_size == 1024 * 1024
    assert settings.level is LogLevel.WARN
    assert settings.locking == "minimal"
    assert settings.clock == "utc"


def test_environment_overrides_keyword_arguments() -> None:
    environ = {
        "LOG_ROLLING_FILE": "/var/log/svc.log",
        "LOG_ROLLING_ROLLING_STYLE": "once",
        "LOG_ROLLING_MAX_BACKUPS": "7",
        "LOG_ROLLING_STATIC_NAME": "off",
        "LOG_ROLLING_CONSOLE": "yes",
        "LOG_ROLLING_ASYNC": "1",
        "LOG_ROLLING_BUFFER_SIZE": "32",
    }
    settings = build_rolling_settings(file="app.log", max_backups=2, environ=environ)

    assert settings.file == "/var/log/svc.log"
    assert settings.rolling_style is RollingStyle.NONE
    assert settings.max_backups == 7
    assert settings.static_name is False
    assert settings.console is True
    assert settings.async_enabled is True
    assert settings.buffer_size == 32


def test_blank_environment_values_are_ignored() -> None:
    settings = build_rolling_settings(file="app.log", max_backups=4, environ={"LOG_ROLLING_MAX_BACKUPS": "  "})
    assert settings.max_backups == 4


def test_process_environment_is_used_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_ROLLING_FILE", "from-env.log")
    assert build_rolling_settings().file == "from-env.log"


@pytest.mark.parametrize(
    ("variable", "raw"),
    [
        ("LOG_ROLLING_MAX_BACKUPS", "many"),
        ("LOG_ROLLING_APPEND", "perhaps"),
        ("LOG_ROLLING_MAX_FILE_SIZE", "huge"),
        ("LOG_ROLLING_ROLLING_STYLE", "hourly"),
        ("LOG_ROLLING_LOCKING", "global"),
        ("LOG_ROLLING_CLOCK", "mars"),
        ("LOG_ROLLING_LEVEL", "LOUD"),
    ],
)
def test_invalid_environment_values_name_the_variable(variable: str, raw: str) -> None:
    with pytest.raises(ValueError, match=variable):
        build_rolling_settings(file="app.log", environ={variable: raw})


def test_missing_file_is_rejected() -> None:
    with pytest.raises(ValueError, match="LOG_ROLLING_FILE"):
        build_rolling_settings(environ={})


def test_unknown_keyword_is_a_type_error() -> None:
    with pytest.raises(TypeError, match="max_files"):
        build_rolling_settings(file="app.log", max_files=3, environ={})
