from __future__ import annotations

import threading
import time

import pytest

from retryspec import ErrorCode, RetryCancelledError, configure


def _always_fail(calls: dict[str, int]):
    def operation() -> None:
        calls["count"] += 1
        raise RuntimeError(f"failure {calls['count']}")

    return operation


def test_cancel_event_interrupts_long_backoff() -> None:
    calls = {"count": 0}
    cancel = threading.Event()
    timer = threading.Timer(0.05, cancel.set)
    timer.start()

    started = time.monotonic()
    try:
        with pytest.raises(RetryCancelledError) as excinfo:
            configure().with_first_retry_delay(30).with_max_retries(3).run(_always_fail(calls), cancel=cancel)
    finally:
        timer.cancel()

    assert time.monotonic() - started < 10
    assert calls["count"] == 1
    assert excinfo.value.code == ErrorCode.CANCELLED
    assert excinfo.value.attempts == 1
    assert str(excinfo.value.__cause__) == "failure 1"


def test_cancellation_skips_fallback() -> None:
    cancel = threading.Event()
    cancel.set()
    fallback_calls = {"count": 0}

    def fallback() -> None:
        fallback_calls["count"] += 1

    with pytest.raises(RetryCancelledError):
        (
            configure()
            .with_first_retry_delay(0.01)
            .with_fallback(fallback)
            .run(_always_fail({"count": 0}), cancel=cancel)
        )

    assert fallback_calls["count"] == 0


def test_cancel_checked_after_injected_sleep() -> None:
    calls = {"count": 0}
    cancel = threading.Event()

    with pytest.raises(RetryCancelledError):
        configure().with_max_retries(5).run(
            _always_fail(calls),
            cancel=cancel,
            sleep=lambda _: cancel.set(),
        )

    assert calls["count"] == 1


def test_deadline_truncates_backoff() -> None:
    calls = {"count": 0}
    waits: list[float] = []

    with pytest.raises(RetryCancelledError):
        configure().with_first_retry_delay(60).with_max_retries(2).run(
            _always_fail(calls),
            deadline=time.monotonic() + 0.5,
            sleep=waits.append,
        )

    assert calls["count"] == 1
    assert len(waits) == 1
    assert waits[0] <= 0.5


def test_expired_deadline_abandons_without_waiting() -> None:
    waits: list[float] = []

    with pytest.raises(RetryCancelledError):
        configure().with_first_retry_delay(0.01).run(
            _always_fail({"count": 0}),
            deadline=time.monotonic() - 1,
            sleep=waits.append,
        )

    assert waits == []


def test_deadline_far_away_does_not_interfere() -> None:
    calls = {"count": 0}

    def operation() -> str:
        calls["count"] += 1
        if calls["count"] < 3:
            raise RuntimeError("flaky")
        return "ok"

    result = configure().with_first_retry_delay(0.001).with_max_retries(3).run(
        operation, deadline=time.monotonic() + 60
    )

    assert result == "ok"
    assert calls["count"] == 3


def test_shared_specification_across_threads() -> None:
    spec = configure().with_first_retry_delay(0.001).with_max_retries(2)
    results: list[str] = []
    lock = threading.Lock()

    def worker() -> None:
        calls = {"count": 0}

        def operation() -> str:
            calls["count"] += 1
            if calls["count"] < 3:
                raise RuntimeError("flaky")
            return "ok"

        value = spec.run(operation)
        with lock:
            results.append(value)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results == ["ok"] * 8
    assert spec.max_retries == 2
