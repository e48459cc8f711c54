from __future__ import annotations

import os
from pathlib import Path

import pytest

from lib_log_rolling.adapters.file_appender import FileAppender
from lib_log_rolling.adapters.locking import MinimalLock
from lib_log_rolling.adapters.pattern import PatternLayout, PatternString
from lib_log_rolling.domain.errors import ErrorCode
from tests.conftest import EventFactory, RecordingErrorHandler
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def build(path: Path, **options: object) -> FileAppender:
    options.setdefault("layout", PatternLayout("%message%newline{UNIX}"))
    appender = FileAppender(file=str(path), **options)  # type: ignore[arg-type]
    appender.activate_options()
    return appender


def test_writes_rendered_events(tmp_path: Path, make_event: EventFactory) -> None:
    target = tmp_path / "app.log"
    appender = build(target)
    appender.append(make_event("one"))
    appender.append(make_event("two"))
    appender.close()

    assert target.read_text(encoding="utf-8") == "one\ntwo\n"
    assert appender.file_name == os.path.abspath(target)


def test_append_to_file_false_truncates(tmp_path: Path, make_event: EventFactory) -> None:
    target = tmp_path / "app.log"
    target.write_text("stale\n", encoding="utf-8")
    appender = build(target, append_to_file=False)
    appender.append(make_event("fresh"))
    appender.close()

    assert target.read_text(encoding="utf-8") == "fresh\n"


def test_append_to_file_true_keeps_existing_content(tmp_path: Path, make_event: EventFactory) -> None:
    target = tmp_path / "app.log"
    target.write_text("kept\n", encoding="utf-8")
    appender = build(target)
    appender.append(make_event("added"))
    appender.close()

    assert target.read_text(encoding="utf-8") == "kept\nadded\n"


def test_header_and_footer_frame_the_file(tmp_path: Path, make_event: EventFactory) -> None:
    target = tmp_path / "app.log"
    appender = build(target, layout=PatternLayout("%message%newline{UNIX}", header="[start]\n", footer="[end]\n"))
    appender.append(make_event("body"))
    appender.close()

    assert target.read_text(encoding="utf-8") == "[start]\nbody\n[end]\n"


def test_minimal_lock_allows_other_readers_between_writes(tmp_path: Path, make_event: EventFactory) -> None:
    target = tmp_path / "app.log"
    appender = build(target, locking_model=MinimalLock())
    appender.append(make_event("first"))
    assert target.read_text(encoding="utf-8") == "first\n"
    appender.append(make_event("second"))
    appender.close()

    assert target.read_text(encoding="utf-8") == "first\nsecond\n"


def test_file_name_patterns_are_expanded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, make_event: EventFactory) -> None:
    monkeypatch.setenv("LOG_ROLLING_TEST_DIR", str(tmp_path))
    appender = build(Path("%env{LOG_ROLLING_TEST_DIR}") / "svc.log")
    appender.append(make_event("expanded"))
    appender.close()

    assert (tmp_path / "svc.log").read_text(encoding="utf-8") == "expanded\n"


def test_pattern_string_instance_is_accepted(tmp_path: Path, make_event: EventFactory) -> None:
    pattern = PatternString(str(tmp_path / "%property{tier}.log"), properties={"tier": "web"})
    appender = FileAppender(file=pattern, layout=PatternLayout("%message"))
    appender.activate_options()
    appender.append(make_event("x"))
    appender.close()

    assert (tmp_path / "web.log").read_text(encoding="utf-8") == "x"


def test_activation_without_file_raises_value_error() -> None:
    with pytest.raises(ValueError, match="no file name configured"):
        FileAppender(layout=PatternLayout()).activate_options()


def test_activation_propagates_open_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(OSError):
        build(blocker / "app.log")


def test_failed_reopen_is_reported_and_retried(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    make_event: EventFactory,
    error_recorder: RecordingErrorHandler,
) -> None:
    target = tmp_path / "app.log"
    appender = build(target, error_handler=error_recorder)
    appender.reset()
    original_open = appender.locking_model.open_file

    def refuse(filename: str, append: bool, encoding: str) -> None:
        raise PermissionError(filename)

    monkeypatch.setattr(appender.locking_model, "open_file", refuse)
    appender.append(make_event("lost"))
    monkeypatch.setattr(appender.locking_model, "open_file", original_open)
    appender.append(make_event("recovered"))
    appender.close()

    assert error_recorder.codes == [ErrorCode.FILE_OPEN_FAILURE]
    assert target.read_text(encoding="utf-8") == "recovered\n"



def test_writer_is_reopened_after_reset(tmp_path: Path, make_event: EventFactory) -> None:
    target = tmp_path / "app.log"
    appender = build(target)
    appender.append(make_event("before"))
    appender.reset()
    appender.append(make_event("after"))
    appender.close()

    assert target.read_text(encoding="utf-8") == "before\nafter\n"
