from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from lib_log_rolling.adapters.queue import QueueAdapter
from lib_log_rolling.domain.events import LogEvent
from lib_log_rolling.domain.levels import LogLevel
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]

Worker = Callable[[LogEvent], None]


def build_event(index: int) -> LogEvent:
    return LogEvent(
        timestamp=datetime(2025, 9, 23, 12, index, tzinfo=timezone.utc),
        logger_name="tests",
        level=LogLevel.INFO,
        message=f"evt-{index}",
    )


def start_queue(worker: Worker, **options: Any) -> QueueAdapter:
    adapter = QueueAdapter(worker=worker, **options)
    adapter.start()
    return adapter


def test_queue_processes_events_in_order() -> None:
    processed: list[str] = []
    lock = threading.Lock()

    def worker(event: LogEvent) -> None:
        with lock:
            processed.append(event.message)

    adapter = start_queue(worker)
    for index in range(5):
        adapter.put(build_event(index))
    adapter.stop()
    assert processed == [f"evt-{index}" for index in range(5)]
    assert adapter.running is False


def test_queue_rejects_unknown_drop_policy() -> None:
    with pytest.raises(ValueError, match="drop_policy"):
        QueueAdapter(drop_policy="spill")


def test_queue_drop_policy_invokes_callback() -> None:
    dropped: list[str] = []

    adapter = QueueAdapter(worker=None, maxsize=1, drop_policy="drop", on_drop=lambda event: dropped.append(event.message))

    assert adapter.put(build_event(0)) is True
    assert adapter.put(build_event(1)) is False
    assert dropped == ["evt-1"]


def test_queue_block_policy_timeout_triggers_drop() -> None:
    dropped: list[str] = []

    adapter = QueueAdapter(
        worker=None,
        maxsize=1,
        drop_policy="block",
        on_drop=lambda event: dropped.append(event.message),
        timeout=0.01,
    )

    assert adapter.put(build_event(0)) is True
    assert adapter.put(build_event(1)) is False
    assert dropped == ["evt-1"]


def test_queue_stop_drain_flushes_pending_events() -> None:
    processed: list[str] = []
    lock = threading.Lock()

    def worker(event: LogEvent) -> None:
        with lock:
            processed.append(event.message)

    adapter = start_queue(worker)
    for index in range(3):
        adapter.put(build_event(index))
    adapter.stop(drain=True)
    assert len(processed) == 3


def test_queue_stop_without_drain_hands_queued_events_to_drop_handler() -> None:
    processed: list[str] = []
    dropped: list[str] = []
    first_event_started = threading.Event()
    release_first_event = threading.Event()

    def worker(event: LogEvent) -> None:
        if event.message == "evt-0":
            first_event_started.set()
            release_first_event.wait(timeout=1.0)
        processed.append(event.message)

    adapter = start_queue(worker, on_drop=lambda event: dropped.append(event.message))
    adapter.put(build_event(0))
    assert first_event_started.wait(timeout=1.0)
    adapter.put(build_event(1))
    adapter.put(build_event(2))

    stopper = threading.Thread(target=adapter.stop, kwargs={"drain": False})
    stopper.start()
    deadline = time.monotonic() + 1.0
    while not adapter._discard and time.monotonic() < deadline:
        time.sleep(0.005)
    release_first_event.set()
    stopper.join(timeout=2.0)

    assert not stopper.is_alive()
    assert processed == ["evt-0"]
    assert dropped == ["evt-1", "evt-2"]


def test_queue_worker_failure_is_logged_and_processing_continues(caplog: pytest.LogCaptureFixture) -> None:
    processed: list[str] = []
    diagnostics: list[str] = []

    def worker(event: LogEvent) -> None:
        if event.message == "evt-0":
            raise RuntimeError("boom")
        processed.append(event.message)

    adapter = start_queue(worker, diagnostic=lambda name, payload: diagnostics.append(name))
    with caplog.at_level("ERROR"):
        adapter.put(build_event(0))
        adapter.put(build_event(1))
        adapter.stop()

    assert processed == ["evt-1"]
    assert adapter.worker_failed is True
    assert diagnostics == ["queue_worker_error"]
    assert "Queue worker raised" in caplog.text


def test_queue_wait_until_idle_reports_completion() -> None:
    release = threading.Event()

    def worker(event: LogEvent) -> None:
        release.wait(timeout=1.0)

    adapter = start_queue(worker)
    adapter.put(build_event(0))
    assert adapter.wait_until_idle(timeout=0.01) is False
    release.set()
    assert adapter.wait_until_idle(timeout=1.0) is True
    adapter.stop()


def test_queue_stop_timeout_raises_runtime_error() -> None:
    release = threading.Event()

    def worker(event: LogEvent) -> None:
        release.wait(timeout=2.0)

    adapter = start_queue(worker)
    adapter.put(build_event(0))
    try:
        with pytest.raises(RuntimeError, match="failed to stop"):
            adapter.stop(drain=True, timeout=0.05)
    finally:
        release.set()


def test_queue_can_restart_after_stop() -> None:
    processed: list[str] = []
    adapter = start_queue(lambda event: processed.append(event.message))
    adapter.put(build_event(0))
    adapter.stop()

    adapter.start()
    adapter.put(build_event(1))
    adapter.stop()

    assert processed == ["evt-0", "evt-1"]
