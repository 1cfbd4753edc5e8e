"""Deterministic fake clock for testing.

Satisfies ClockPort (PEP 544 structural subtyping) with a manually
controllable nanosecond value, no real time dependency.
"""

from __future__ import annotations

from dataclasses import dataclass

from unitduration._duration import Duration


@dataclass
class FakeClock:
    """Test double for ClockPort.

    Attributes:
        _time_ns: The current "now" value returned by ``now_ns()``.
            Set directly, via the constructor, or with :meth:`advance`.

    Example::

        clock = FakeClock()
        start = clock.now_ns()
        clock.advance(Duration.parse("1m 30s"))
        assert Duration.of_nanos(clock.now_ns() - start) == Duration.of_seconds(90)
    """

    _time_ns: int = 0

    def now_ns(self) -> int:
        """Return the manually set time value."""
        return self._time_ns

    def advance(self, step: Duration | int) -> None:
        """Move the clock forward by a duration or a nanosecond count."""
        nanos = step.nanos if isinstance(step, Duration) else Duration.of_nanos(step).nanos
        self._time_ns += nanos
