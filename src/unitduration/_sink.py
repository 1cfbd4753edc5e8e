"""Measurement sink: a single-owner, concurrently-fed list of durations.

The sink owns its list inside one worker thread.  Producers on any
thread hand over measurements through a queue (:meth:`MeasurementSink.send`
never blocks on the list), and the worker appends them in arrival
order.  After each change the worker publishes an immutable tuple, so
:meth:`~MeasurementSink.snapshot` is a lock-free read of the latest
state.

Typical use with :func:`~unitduration._timing.measured`::

    sink = MeasurementSink()
    fetch = measure_to_sink(sink, fetch)
    ...
    sink.await_idle()
    print([str(d) for d in sink.snapshot()])
    sink.close()
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable, Iterable
from types import TracebackType
from typing import Self, TypeVar

from unitduration._clock import ClockPort
from unitduration._duration import Duration
from unitduration._timing import measured

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., object])

_STOP = object()


class MeasurementSink:
    """Append-only collection of :class:`Duration` values fed by messages.

    Args:
        name: Worker thread name, also used in log lines.
        initial: Measurements the sink starts with.
    """

    def __init__(
        self,
        *,
        name: str = "measurement-sink",
        initial: Iterable[Duration] = (),
    ) -> None:
        self._name = name
        self._values: list[Duration] = list(initial)
        self._published: tuple[Duration, ...] = tuple(self._values)
        self._queue: queue.SimpleQueue[object] = queue.SimpleQueue()
        self._closed = False
        self._close_lock = threading.Lock()
        self._worker = threading.Thread(target=self._run, name=name, daemon=True)
        self._worker.start()
        logger.debug("Measurement sink '%s' started", name)

    @property
    def closed(self) -> bool:
        """True once :meth:`close` has been called."""
        return self._closed

    # -- producer side ------------------------------------------------------

    def send(self, duration: Duration) -> None:
        """Queue *duration* for appending; returns immediately.

        Raises:
            TypeError: If *duration* is not a :class:`Duration`.
            RuntimeError: If the sink is closed.
        """
        if not isinstance(duration, Duration):
            msg = f"expected Duration, got {type(duration).__name__}"
            raise TypeError(msg)
        with self._close_lock:
            if self._closed:
                msg = f"Measurement sink '{self._name}' is closed"
                raise RuntimeError(msg)
            self._queue.put(duration)

    def await_idle(self, timeout: float | None = None) -> bool:
        """Block until every measurement sent so far has been applied.

        Args:
            timeout: Seconds to wait at most; ``None`` waits forever.

        Returns:
            ``True`` if the sink caught up, ``False`` on timeout.
        """
        marker = threading.Event()
        # Queued under the lock so close() cannot slip _STOP ahead of it.
        with self._close_lock:
            closed = self._closed
            if not closed:
                self._queue.put(marker)
        if closed:
            self._worker.join(timeout)
            return not self._worker.is_alive()
        return marker.wait(timeout)

    # -- reader side --------------------------------------------------------

    def snapshot(self) -> tuple[Duration, ...]:
        """Return the measurements applied so far, oldest first."""
        return self._published

    def __len__(self) -> int:
        return len(self._published)

    # -- lifecycle ----------------------------------------------------------

    def close(self, timeout: float | None = None) -> None:
        """Apply pending measurements, then stop the worker thread.

        Idempotent; later :meth:`send` calls raise ``RuntimeError``.
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_STOP)
        self._worker.join(timeout)
        logger.debug(
            "Measurement sink '%s' closed with %d measurements",
            self._name,
            len(self._published),
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -- worker -------------------------------------------------------------

    def _run(self) -> None:
        while True:
            message = self._queue.get()
            if message is _STOP:
                return
            if isinstance(message, threading.Event):
                message.set()
                continue
            self._values.append(message)  # type: ignore[arg-type]
            self._published = tuple(self._values)


def measure_to_sink(
    sink: MeasurementSink,
    func: F,
    *,
    clock: ClockPort | None = None,
) -> F:
    """Wrap *func* so each invocation's duration is sent to *sink*."""

    def _send(duration: Duration, *args: object, **kwargs: object) -> None:
        sink.send(duration)

    return measured(_send, func, clock=clock)
