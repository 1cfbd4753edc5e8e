"""Unit tests for unitduration._timing — elapsed-time wrapper.

Test Techniques Used:
    - Clock Injection: FakeClock advanced inside the measured code
    - Log Capture: caplog for the elapsed-time line and its level
    - Specification-based Testing: Return values pass through
    - Error Condition Testing: Failing computations
"""

from __future__ import annotations

import logging

import pytest

from unitduration._duration import Duration
from unitduration._settings import TimingSettings
from unitduration._timing import Timer, measured, timed
from unitduration.testing import FakeClock

LOGGER = "unitduration._timing"


@pytest.fixture
def caplog_info(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger=LOGGER)
    return caplog


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------


class TestTimerContextManager:
    """``with Timer(...)`` measurement and reporting.

    Technique: Clock Injection + Log Capture.
    """

    def test_measures_elapsed(self, fake_clock: FakeClock) -> None:
        with Timer(clock=fake_clock) as timer:
            fake_clock.advance(Duration.parse("1s 500ms"))
        assert timer.elapsed == Duration.of_millis(1500)

    def test_logs_canonical_line(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        with Timer(clock=fake_clock):
            fake_clock.advance(Duration.parse("20m 34s 567ms"))
        assert caplog_info.messages == ["Elapsed time: 20m 34s 567ms"]
        assert caplog_info.records[0].levelno == logging.INFO

    def test_record_carries_duration(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        with Timer(clock=fake_clock):
            fake_clock.advance(5)
        assert caplog_info.records[0].duration == Duration.of_nanos(5)  # type: ignore[attr-defined]

    def test_custom_label(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        with Timer("load", clock=fake_clock):
            fake_clock.advance(Duration.of_millis(3))
        assert caplog_info.messages == ["load: 3ms"]

    def test_level_from_settings(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        settings = TimingSettings(level="DEBUG", label="took")
        with Timer(clock=fake_clock, settings=settings):
            fake_clock.advance(1)
        assert caplog_info.records[0].levelno == logging.DEBUG
        assert caplog_info.messages == ["took: 1ns"]

    def test_slow_threshold_logs_warning(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        settings = TimingSettings(slow_threshold=Duration.of_seconds(1))
        with Timer(clock=fake_clock, settings=settings):
            fake_clock.advance(Duration.of_seconds(2))
        assert caplog_info.records[0].levelno == logging.WARNING

    def test_below_threshold_uses_configured_level(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        settings = TimingSettings(slow_threshold=Duration.of_seconds(1))
        with Timer(clock=fake_clock, settings=settings):
            fake_clock.advance(Duration.of_seconds(1))
        assert caplog_info.records[0].levelno == logging.INFO

    def test_failure_is_measured_not_logged(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        timer = Timer(clock=fake_clock)
        with pytest.raises(RuntimeError, match="boom"), timer:
            fake_clock.advance(7)
            raise RuntimeError("boom")
        assert timer.elapsed == Duration.of_nanos(7)
        assert caplog_info.records == []

    def test_elapsed_before_completion_raises(self) -> None:
        with pytest.raises(RuntimeError, match="not completed"):
            _ = Timer().elapsed

    def test_stop_before_start_raises(self) -> None:
        with pytest.raises(RuntimeError, match="before start"):
            Timer().stop()

    async def test_async_context_manager(self, fake_clock: FakeClock) -> None:
        async with Timer(clock=fake_clock) as timer:
            fake_clock.advance(Duration.of_micros(2))
        assert str(timer.elapsed) == "2µs"


# ---------------------------------------------------------------------------
# timed
# ---------------------------------------------------------------------------


class TestTimed:
    """``timed`` as decorator and context manager.

    Technique: Specification-based Testing.
    """

    def test_bare_decorator_returns_result(
        self,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        @timed
        def add(a: int, b: int) -> int:
            return a + b

        assert add(2, 3) == 5
        assert len(caplog_info.records) == 1
        assert caplog_info.messages[0].startswith("Elapsed time: ")

    def test_decorator_with_options(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        @timed(label="job", clock=fake_clock)
        def job() -> str:
            fake_clock.advance(Duration.of_millis(123))
            return "done"

        assert job() == "done"
        assert job() == "done"
        assert caplog_info.messages == ["job: 123ms", "job: 123ms"]

    def test_preserves_metadata(self) -> None:
        @timed
        def documented() -> None:
            """Docstring."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."

    async def test_async_function(
        self,
        fake_clock: FakeClock,
        caplog_info: pytest.LogCaptureFixture,
    ) -> None:
        @timed(clock=fake_clock)
        async def fetch() -> int:
            fake_clock.advance(Duration.of_seconds(1))
            return 42

        assert await fetch() == 42
        assert caplog_info.messages == ["Elapsed time: 1s"]

    def test_context_manager(self, fake_clock: FakeClock) -> None:
        with timed(clock=fake_clock) as timer:
            fake_clock.advance(Duration.of_seconds(60))
        assert str(timer.elapsed) == "1m"


# ---------------------------------------------------------------------------
# measured
# ---------------------------------------------------------------------------


class TestMeasured:
    """``measured`` forwards durations and call arguments.

    Technique: Clock Injection + Specification-based Testing.
    """

    def test_passes_duration_and_args(self, fake_clock: FakeClock) -> None:
        calls: list[tuple[object, ...]] = []

        def record(duration: Duration, *args: object, **kwargs: object) -> None:
            calls.append((duration, args, kwargs))

        def work(x: int, *, scale: int = 1) -> int:
            fake_clock.advance(Duration.of_millis(x))
            return x * scale

        wrapped = measured(record, work, clock=fake_clock)

        assert wrapped(5, scale=2) == 10
        assert calls == [(Duration.of_millis(5), (5,), {"scale": 2})]

    def test_no_measurement_on_failure(self, fake_clock: FakeClock) -> None:
        calls: list[Duration] = []

        def fail() -> None:
            raise ValueError("nope")

        wrapped = measured(lambda d: calls.append(d), fail, clock=fake_clock)
        with pytest.raises(ValueError, match="nope"):
            wrapped()
        assert calls == []

    async def test_async_function(self, fake_clock: FakeClock) -> None:
        calls: list[Duration] = []

        async def work() -> str:
            fake_clock.advance(Duration.of_micros(9))
            return "ok"

        wrapped = measured(lambda d: calls.append(d), work, clock=fake_clock)
        assert await wrapped() == "ok"
        assert calls == [Duration.of_micros(9)]

    def test_uses_system_clock_by_default(self) -> None:
        calls: list[Duration] = []
        wrapped = measured(lambda d: calls.append(d), lambda: None)
        wrapped()
        assert len(calls) == 1
        assert isinstance(calls[0], Duration)
