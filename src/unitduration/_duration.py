"""Immutable nanosecond-precision duration value.

A :class:`Duration` is conceptually a single non-negative integer count
of nanoseconds.  It never carries a sign, a fraction or a calendar: a
year is 365 days and nothing else.

**Range.**  Python integers are unbounded, but durations are bounded to
the signed 64-bit nanosecond range (``0 <= nanos <= 2**63 - 1``, a little
over 292 years).  That keeps every value interchangeable with
``time.monotonic_ns()`` readings and with the int64 nanosecond fields of
other systems.  Anything beyond the bound raises
:class:`~unitduration._errors.DurationOverflowError`; values are never
wrapped or truncated.

Usage::

    >>> d = Duration.of_millis(1234567)
    >>> str(d)
    '20m 34s 567ms'
    >>> Duration.parse("1m 30s") == Duration.of_seconds(90)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any, ClassVar

from unitduration._errors import DurationOverflowError

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
    from pydantic.json_schema import JsonSchemaValue
    from pydantic_core import CoreSchema

    from unitduration._units import Unit

MAX_NANOS = 2**63 - 1
"""Largest representable duration, in nanoseconds."""

_NANOS_PER_MICRO = 1_000
_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_SECOND = 1_000_000_000


def _check_count(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"{name} must be an int, got {type(value).__name__}"
        raise TypeError(msg)
    if value < 0:
        msg = f"{name} must be non-negative, got {value}"
        raise ValueError(msg)
    return value


@dataclass(frozen=True, slots=True, order=True, repr=False)
class Duration:
    """Non-negative elapsed time with nanosecond precision.

    Instances are immutable and hashable; equality and ordering compare
    the nanosecond count.  ``str()`` gives the canonical textual form
    (see :func:`unitduration.format_duration`).

    Args:
        nanos: Total length in nanoseconds.

    Raises:
        TypeError: If *nanos* is not an ``int``.
        ValueError: If *nanos* is negative.
        DurationOverflowError: If *nanos* exceeds :data:`MAX_NANOS`.
    """

    nanos: int

    ZERO: ClassVar[Duration]

    def __post_init__(self) -> None:
        _check_count(self.nanos, "nanos")
        if self.nanos > MAX_NANOS:
            msg = f"duration of {self.nanos}ns exceeds the maximum of {MAX_NANOS}ns"
            raise DurationOverflowError(msg)

    # -- constructors -------------------------------------------------------

    @classmethod
    def of_nanos(cls, nanos: int) -> Duration:
        """Create a duration from a nanosecond count."""
        return cls(_check_count(nanos, "nanos"))

    @classmethod
    def of_micros(cls, micros: int) -> Duration:
        """Create a duration from a microsecond count."""
        return cls(_check_count(micros, "micros") * _NANOS_PER_MICRO)

    @classmethod
    def of_millis(cls, millis: int) -> Duration:
        """Create a duration from a millisecond count."""
        return cls(_check_count(millis, "millis") * _NANOS_PER_MILLI)

    @classmethod
    def of_seconds(cls, seconds: int) -> Duration:
        """Create a duration from a whole number of seconds."""
        return cls(_check_count(seconds, "seconds") * _NANOS_PER_SECOND)

    @classmethod
    def from_timedelta(cls, delta: timedelta) -> Duration:
        """Convert a non-negative :class:`~datetime.timedelta`.

        Raises:
            ValueError: If *delta* is negative.
        """
        if delta < timedelta(0):
            msg = f"negative durations are not supported: {delta!r}"
            raise ValueError(msg)
        seconds = delta.days * 86_400 + delta.seconds
        return cls(seconds * _NANOS_PER_SECOND + delta.microseconds * _NANOS_PER_MICRO)

    @classmethod
    def parse(cls, text: str) -> Duration:
        """Decode a canonical duration string.

        Shorthand for :func:`unitduration.parse_duration`.
        """
        from unitduration._codec import parse_duration

        return parse_duration(text)

    # -- conversions --------------------------------------------------------

    def to_nanos(self) -> int:
        """Return the total length in nanoseconds."""
        return self.nanos

    def to_millis(self) -> int:
        """Return whole milliseconds, truncating any remainder."""
        return self.nanos // _NANOS_PER_MILLI

    def total_seconds(self) -> float:
        """Return the length in seconds as a float.

        Informational only; the float may not be exact for large values.
        """
        return self.nanos / _NANOS_PER_SECOND

    def to_timedelta(self) -> timedelta:
        """Return a :class:`~datetime.timedelta`, truncated to microseconds."""
        return timedelta(microseconds=self.nanos // _NANOS_PER_MICRO)

    def parts(self) -> tuple[tuple[Unit, int], ...]:
        """Return the ``(unit, amount)`` decomposition, largest unit first.

        Every unit appears exactly once, including zero amounts.
        """
        from unitduration._codec import decompose

        return decompose(self)

    # -- arithmetic ---------------------------------------------------------

    def __add__(self, other: object) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.nanos + other.nanos)

    def __sub__(self, other: object) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        if other.nanos > self.nanos:
            msg = f"negative durations are not supported: {self!r} - {other!r}"
            raise ValueError(msg)
        return Duration(self.nanos - other.nanos)

    def __mul__(self, factor: object) -> Duration:
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        return Duration(self.nanos * _check_count(factor, "factor"))

    __rmul__ = __mul__

    def __floordiv__(self, divisor: object) -> Any:
        if isinstance(divisor, Duration):
            return self.nanos // divisor.nanos
        if isinstance(divisor, bool) or not isinstance(divisor, int):
            return NotImplemented
        if divisor <= 0:
            msg = f"divisor must be positive, got {divisor}"
            raise ValueError(msg)
        return Duration(self.nanos // divisor)

    def __bool__(self) -> bool:
        return self.nanos != 0

    # -- text ---------------------------------------------------------------

    def __str__(self) -> str:
        from unitduration._codec import format_duration

        return format_duration(self)

    def __repr__(self) -> str:
        return f"Duration({str(self)!r})"

    # -- pydantic integration -----------------------------------------------

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,  # noqa: ARG003
        handler: GetCoreSchemaHandler,  # noqa: ARG003
    ) -> CoreSchema:
        """Validate from ``Duration``, canonical ``str`` or ``timedelta``.

        Serialises back to the canonical string, so settings files and
        JSON documents round-trip through the same textual form.
        """
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(
            cls._pydantic_validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls,
        schema: CoreSchema,  # noqa: ARG003
        handler: GetJsonSchemaHandler,  # noqa: ARG003
    ) -> JsonSchemaValue:
        return {"type": "string", "examples": ["1m 30s", "250ms"]}

    @classmethod
    def _pydantic_validate(cls, value: object) -> Duration:
        # pydantic only converts ValueError/AssertionError into
        # ValidationError, hence the overflow translation.
        if isinstance(value, Duration):
            return value
        try:
            if isinstance(value, str):
                return cls.parse(value)
            if isinstance(value, timedelta):
                return cls.from_timedelta(value)
        except DurationOverflowError as exc:
            raise ValueError(str(exc)) from exc
        msg = f"expected a duration string, got {type(value).__name__}"
        raise ValueError(msg)


Duration.ZERO = Duration(0)
