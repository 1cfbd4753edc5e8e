"""Elapsed-time measurement around arbitrary computations.

Two entry points:

``timed``
    Decorator *and* context manager.  Reads the monotonic clock before
    and after the computation and logs one human-readable line::

        Elapsed time: 1s 250ms 17µs

    The wrapped computation's return value passes through untouched.

``measured``
    Wraps a callable so that every successful invocation reports its
    :class:`~unitduration._duration.Duration` (plus the call arguments)
    to a measurement function instead of the log.

Both accept plain and ``async`` callables, and an injectable
:class:`~unitduration._clock.ClockPort` for deterministic tests.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable
from types import TracebackType
from typing import Any, Self, TypeVar

from unitduration._clock import ClockPort, SystemClock
from unitduration._duration import Duration
from unitduration._settings import TimingSettings

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_LEVELS = logging.getLevelNamesMapping()


class Timer:
    """Measure and log the elapsed time of a block or callable.

    As a context manager (sync or async)::

        with Timer() as timer:
            work()
        timer.elapsed   # Duration

    As a decorator, each call is measured independently::

        @Timer(label="load")
        def load(): ...

    Args:
        label: Prefix of the log line.  Defaults to
            ``settings.label``.
        clock: Monotonic clock.  Defaults to :class:`SystemClock`.
        settings: Reporting configuration (level, slow threshold).
        log: Logger receiving the line.  Defaults to this module's.
    """

    def __init__(
        self,
        label: str | None = None,
        *,
        clock: ClockPort | None = None,
        settings: TimingSettings | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._settings = settings if settings is not None else TimingSettings()
        self._label = label if label is not None else self._settings.label
        self._clock = clock if clock is not None else SystemClock()
        self._log = log if log is not None else logger
        self._start: int | None = None
        self._elapsed: Duration | None = None

    @property
    def elapsed(self) -> Duration:
        """Duration of the last completed measurement.

        Raises:
            RuntimeError: If no measurement has completed yet.
        """
        if self._elapsed is None:
            msg = "Timer has not completed a measurement"
            raise RuntimeError(msg)
        return self._elapsed

    # -- measurement --------------------------------------------------------

    def start(self) -> None:
        """Begin a measurement."""
        self._start = self._clock.now_ns()
        self._elapsed = None

    def stop(self, *, report: bool = True) -> Duration:
        """End the measurement, optionally log it, and return it."""
        if self._start is None:
            msg = "Timer.stop() called before start()"
            raise RuntimeError(msg)
        self._elapsed = Duration.of_nanos(self._clock.now_ns() - self._start)
        self._start = None
        if report:
            self._report(self._elapsed)
        return self._elapsed

    def _report(self, elapsed: Duration) -> None:
        threshold = self._settings.slow_threshold
        if threshold is not None and elapsed > threshold:
            level = logging.WARNING
        else:
            level = _LEVELS[self._settings.level]
        self._log.log(level, "%s: %s", self._label, elapsed, extra={"duration": elapsed})

    def _fresh(self) -> Timer:
        return Timer(
            self._label,
            clock=self._clock,
            settings=self._settings,
            log=self._log,
        )

    # -- context manager ----------------------------------------------------

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # Failed computations are measured but not reported.
        self.stop(report=exc_type is None)

    async def __aenter__(self) -> Self:
        return self.__enter__()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.__exit__(exc_type, exc, tb)

    # -- decorator ----------------------------------------------------------

    def __call__(self, func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                async with self._fresh():
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with self._fresh():
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]


def timed(
    func: F | None = None,
    /,
    *,
    label: str | None = None,
    clock: ClockPort | None = None,
    settings: TimingSettings | None = None,
) -> Any:
    """Log the elapsed time of a callable or a ``with`` block.

    Usable bare, with options, or as a context manager::

        @timed
        def job(): ...

        @timed(label="import")
        async def job(): ...

        with timed() as timer:
            ...

    Returns:
        The wrapped callable when *func* is given, otherwise a
        :class:`Timer`.
    """
    timer = Timer(label, clock=clock, settings=settings)
    if func is not None:
        return timer(func)
    return timer


def measured(
    measurement_fn: Callable[..., object],
    func: F,
    *,
    clock: ClockPort | None = None,
) -> F:
    """Wrap *func* so its execution time is reported to *measurement_fn*.

    After every successful call, ``measurement_fn(duration, *args,
    **kwargs)`` is invoked with the elapsed :class:`Duration` followed by
    the arguments *func* was called with.  The return value of *func*
    is passed through; exceptions propagate without a measurement.

    Args:
        measurement_fn: Receiver of each measurement.
        func: Callable (sync or async) to measure.
        clock: Monotonic clock.  Defaults to :class:`SystemClock`.
    """
    resolved_clock = clock if clock is not None else SystemClock()

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            start = resolved_clock.now_ns()
            result = await func(*args, **kwargs)
            elapsed = Duration.of_nanos(resolved_clock.now_ns() - start)
            measurement_fn(elapsed, *args, **kwargs)
            return result

        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        start = resolved_clock.now_ns()
        result = func(*args, **kwargs)
        elapsed = Duration.of_nanos(resolved_clock.now_ns() - start)
        measurement_fn(elapsed, *args, **kwargs)
        return result

    return wrapper  # type: ignore[return-value]
