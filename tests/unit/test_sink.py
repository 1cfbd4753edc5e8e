"""Unit tests for unitduration._sink — measurement sink.

Test Techniques Used:
    - State-based Testing: Snapshot after await_idle
    - Concurrency Testing: Many producer threads, no lost values
    - Lifecycle Testing: close() semantics and idempotence
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any

import pytest

from unitduration._duration import Duration
from unitduration._sink import MeasurementSink, measure_to_sink
from unitduration.testing import FakeClock


@pytest.fixture
def sink() -> Iterator[MeasurementSink]:
    s = MeasurementSink(name="test-sink")
    yield s
    s.close()


class TestMeasurementSink:
    """Message-passing sink state.

    Technique: State-based Testing.
    """

    def test_starts_empty(self, sink: MeasurementSink) -> None:
        assert sink.snapshot() == ()
        assert len(sink) == 0

    def test_initial_values(self) -> None:
        with MeasurementSink(initial=[Duration.of_millis(1)]) as s:
            assert s.snapshot() == (Duration.of_millis(1),)

    def test_send_then_await_idle(self, sink: MeasurementSink) -> None:
        sink.send(Duration.of_millis(1))
        sink.send(Duration.of_millis(2))
        assert sink.await_idle(timeout=5.0)
        assert sink.snapshot() == (Duration.of_millis(1), Duration.of_millis(2))

    def test_snapshot_is_immutable_copy(self, sink: MeasurementSink) -> None:
        sink.send(Duration.of_nanos(1))
        sink.await_idle(timeout=5.0)
        first = sink.snapshot()
        sink.send(Duration.of_nanos(2))
        sink.await_idle(timeout=5.0)
        assert first == (Duration.of_nanos(1),)
        assert isinstance(first, tuple)

    def test_send_rejects_non_duration(self, sink: MeasurementSink) -> None:
        with pytest.raises(TypeError):
            sink.send(5)  # type: ignore[arg-type]

    def test_concurrent_producers(self, sink: MeasurementSink) -> None:
        """Every value sent from every thread is applied exactly once.

        Technique: Concurrency Testing.
        """

        def produce(offset: int) -> None:
            for i in range(200):
                sink.send(Duration.of_nanos(offset * 1000 + i))

        threads = [threading.Thread(target=produce, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sink.await_idle(timeout=5.0)
        values = sink.snapshot()
        assert len(values) == 1600
        assert {d.nanos for d in values} == {
            n * 1000 + i for n in range(8) for i in range(200)
        }


class TestLifecycle:
    """close() and the context manager.

    Technique: Lifecycle Testing.
    """

    def test_close_applies_pending(self) -> None:
        s = MeasurementSink()
        for i in range(50):
            s.send(Duration.of_nanos(i))
        s.close()
        assert len(s.snapshot()) == 50
        assert s.closed

    def test_send_after_close_raises(self) -> None:
        s = MeasurementSink()
        s.close()
        with pytest.raises(RuntimeError, match="closed"):
            s.send(Duration.ZERO)

    def test_close_is_idempotent(self) -> None:
        s = MeasurementSink()
        s.close()
        s.close()
        assert s.closed

    def test_await_idle_after_close(self) -> None:
        s = MeasurementSink()
        s.close()
        assert s.await_idle(timeout=0.1)

    def test_close_racing_await_idle(self) -> None:
        """A close() started while await_idle() enqueues cannot strand it.

        Technique: Concurrency Testing. close() is launched from inside
        the queue hand-off, the narrowest window for the race.
        """
        s = MeasurementSink()
        s.send(Duration.of_millis(1))
        queue = _CloseOnMarkerQueue(s._queue, s)
        s._queue = queue  # type: ignore[assignment]

        assert s.await_idle(timeout=2.0)
        assert queue.closer is not None
        queue.closer.join(timeout=2.0)
        assert s.closed
        assert s.snapshot() == (Duration.of_millis(1),)


class _CloseOnMarkerQueue:
    """Queue wrapper that starts ``sink.close()`` just before a marker is queued."""

    def __init__(self, inner: Any, sink: MeasurementSink) -> None:
        self._inner = inner
        self._sink = sink
        self.closer: threading.Thread | None = None

    def put(self, item: object) -> None:
        if isinstance(item, threading.Event) and self.closer is None:
            self.closer = threading.Thread(target=self._sink.close)
            self.closer.start()
            # Give close() every chance to run first.
            self.closer.join(timeout=0.1)
        self._inner.put(item)

    def get(self) -> object:
        return self._inner.get()


class TestMeasureToSink:
    """Wrapping a function so its durations land in the sink.

    Technique: Clock Injection.
    """

    def test_each_invocation_is_recorded(
        self,
        sink: MeasurementSink,
        fake_clock: FakeClock,
    ) -> None:
        def work(ms: int) -> int:
            fake_clock.advance(Duration.of_millis(ms))
            return ms

        wrapped = measure_to_sink(sink, work, clock=fake_clock)

        assert [wrapped(1), wrapped(20), wrapped(300)] == [1, 20, 300]
        sink.await_idle(timeout=5.0)
        assert [str(d) for d in sink.snapshot()] == ["1ms", "20ms", "300ms"]

    async def test_async_function(
        self,
        sink: MeasurementSink,
        fake_clock: FakeClock,
    ) -> None:
        async def work() -> None:
            fake_clock.advance(Duration.of_seconds(2))

        await measure_to_sink(sink, work, clock=fake_clock)()
        sink.await_idle(timeout=5.0)
        assert sink.snapshot() == (Duration.of_seconds(2),)
