from __future__ import annotations

import io
import logging
import os
import re
from datetime import datetime, timezone
from typing import Any

import pytest

from lib_log_rolling.adapters import diagnostics
from lib_log_rolling.adapters.pattern import PatternLayout, PatternString
from lib_log_rolling.domain.levels import LogLevel
from lib_log_rolling.domain.pattern import PatternConverter, SupportsWrite
from tests.conftest import EventFactory
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_layout_pads_level_and_renders_message(make_event: EventFactory) -> None:
    layout = PatternLayout("%-5level|%message")
    assert layout.render(make_event("hi", level=LogLevel.WARN)) == "WARN |hi"


def test_layout_default_pattern_is_message_and_newline(make_event: EventFactory) -> None:
    assert PatternLayout().render(make_event("plain")) == "plain" + os.linesep


@pytest.mark.parametrize(
    "pattern, expected",
    [
        ("%logger", "app.http.server"),
        ("%logger{1}", "server"),
        ("%c{2}", "http.server"),
        ("%.6logger", "server"),
        ("%p %m", "ERROR boom"),
        ("%thread|%hostname|%username", "worker-3|web01|ada"),
        ("%t|%w", "worker-3|ada"),
    ],
)
def test_layout_event_converters(pattern: str, expected: str, make_event: EventFactory) -> None:
    event = make_event(
        "boom",
        level=LogLevel.ERROR,
        logger_name="app.http.server",
        thread_name="worker-3",
        hostname="web01",
        user_name="ada",
    )
    assert PatternLayout(pattern).render(event) == expected


def test_layout_renders_event_dates(make_event: EventFactory) -> None:
    event = make_event(timestamp=datetime(2025, 3, 7, 14, 5, 9, 123000, tzinfo=timezone.utc))
    assert PatternLayout("%utcdate").render(event) == "2025-03-07 14:05:09,123"
    assert PatternLayout("%utcdate{yyyyMMdd}").render(event) == "20250307"
    local = datetime(2025, 3, 7, 14, 5, 9, 123000, tzinfo=timezone.utc).astimezone()
    assert PatternLayout("%date{HH:mm}").render(event) == local.strftime("%H:%M")
    assert PatternLayout("%d{ABSOLUTE}").render(event) == local.strftime("%H:%M:%S") + ",123"


def test_layout_renders_properties(make_event: EventFactory) -> None:
    event = make_event(properties={"request": "r1", "user": "ada"})
    assert PatternLayout("%property{request}").render(event) == "r1"
    assert PatternLayout("%X{missing}").render(event) == "(null)"
    assert PatternLayout("%P").render(event) == "{request=r1, user=ada}"


def test_layout_with_exception_converter_renders_exc_info_itself(make_event: EventFactory) -> None:
    plain = PatternLayout("%message")
    detailed = PatternLayout("%message %exception")

    assert plain.ignores_exception is True
    assert detailed.ignores_exception is False
    assert detailed.render(make_event("failed", exc_info="Traceback: boom")) == "failed Traceback: boom"


def test_layout_keeps_header_and_footer(make_event: EventFactory) -> None:
    layout = PatternLayout("%message", header="[start]", footer="[end]")
    assert (layout.header, layout.footer) == ("[start]", "[end]")


def test_layout_conversion_pattern_can_be_replaced(make_event: EventFactory) -> None:
    layout = PatternLayout("%message")
    layout.conversion_pattern = "%level"
    assert layout.render(make_event(level=LogLevel.DEBUG)) == "DEBUG"


class ShoutConverter(PatternConverter):
    def convert(self, writer: SupportsWrite, state: Any) -> None:
        writer.write(state.message.upper())


def test_layout_add_converter_is_instance_local(make_event: EventFactory) -> None:
    layout = PatternLayout("%shout!")
    layout.add_converter("shout", ShoutConverter)
    other = PatternLayout("%shout!")

    assert layout.render(make_event("hey")) == "HEY!"
    assert other.render(make_event("hey")) == "%shout!"


def test_unknown_directive_is_reported_on_internal_channel(
    make_event: EventFactory, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger=diagnostics.INTERNAL_LOGGER_NAME):
        layout = PatternLayout("%zork %message")

    assert layout.render(make_event("x")) == "%zork x"
    assert "Unknown pattern directive '%zork'" in caplog.text


def test_pattern_string_expands_environment_and_literals(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_ROLLING_TEST_DIR", "/var/log/svc")
    assert PatternString("%env{LOG_ROLLING_TEST_DIR}/%literal{app}.log").format() == "/var/log/svc/app.log"
    assert PatternString("%env{LOG_ROLLING_TEST_UNSET_VAR}x").format() == "x"


def test_pattern_string_properties_and_process_id() -> None:
    pattern = PatternString("%property{tier}-%processid", properties={"tier": "web"})
    assert pattern.format() == f"web-{os.getpid()}"
    pattern.properties["tier"] = "db"
    assert pattern.format().startswith("db-")


def test_pattern_string_random_and_dates() -> None:
    token = PatternString("%random{6}").format()
    assert re.fullmatch(r"[A-Z0-9]{6}", token)
    assert re.fullmatch(r"[A-Z0-9]{4}", PatternString("%random").format())
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", PatternString("%date{yyyy-MM-dd}").format())
    assert PatternString("%utcdate{yyyy}").format() == str(datetime.now(timezone.utc).year)


def test_pattern_string_identity_helpers_never_fail() -> None:
    rendered = PatternString("%identity|%username|%appdomain").format()
    assert rendered.count("|") == 2
    assert all(part for part in rendered.split("|"))


def test_pattern_string_format_to_writes_into_sink() -> None:
    buffer = io.StringIO()
    PatternString("a%newline{UNIX}b").format_to(buffer)
    assert buffer.getvalue() == "a\nb"


def test_pattern_string_without_pattern_formats_empty() -> None:
    pattern = PatternString()
    assert pattern.format() == ""
    pattern.conversion_pattern = "%literal{ready}"
    assert pattern.format() == "ready"
