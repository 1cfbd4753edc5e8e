"""Monotonic clock port and system adapter.

Provides ClockPort (Protocol) and SystemClock for measuring elapsed time
in integer nanoseconds.

**Why monotonic?** ``time.monotonic_ns()`` is immune to NTP adjustments
and manual system-clock changes, making it suitable for measuring
elapsed durations.  The epoch is arbitrary; only *differences* between
``now_ns()`` calls are meaningful (PEP 418).  Integer nanoseconds map
directly onto :meth:`Duration.of_nanos <unitduration.Duration.of_nanos>`
with no float rounding.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    """Monotonic nanosecond clock for timing measurements.

    The default implementation wraps ``time.monotonic_ns()``.  Tests
    inject :class:`~unitduration.testing.FakeClock` for reproducible
    timing.
    """

    def now_ns(self) -> int:
        """Return monotonic time in nanoseconds.

        Returns:
            An int counting nanoseconds from an arbitrary epoch.
            Only the *difference* between two calls is meaningful.
        """
        ...


class SystemClock:
    """Production clock wrapping ``time.monotonic_ns()``.

    Satisfies :class:`ClockPort` via structural subtyping, no
    base-class inheritance required (PEP 544).

    Usage::

        clock = SystemClock()
        start = clock.now_ns()
        # ... some work ...
        elapsed = Duration.of_nanos(clock.now_ns() - start)
    """

    def now_ns(self) -> int:
        """Return monotonic time in nanoseconds."""
        return time.monotonic_ns()
