"""unitduration.

Canonical human-readable durations with nanosecond precision::

    >>> from unitduration import Duration, parse_duration
    >>> str(Duration.of_millis(1234567))
    '20m 34s 567ms'
    >>> parse_duration("1D 10h 17m 36s") == parse_duration("123456s")
    True

Durations embed in structured text as ``#unit/duration "..."`` tagged
literals, and the timing, measurement and scheduling helpers consume
them directly.
"""

from importlib.metadata import PackageNotFoundError, version

from unitduration._clock import ClockPort, SystemClock
from unitduration._codec import (
    decompose,
    format_duration,
    normalize_duration,
    parse_duration,
)
from unitduration._duration import MAX_NANOS, Duration
from unitduration._errors import (
    DurationError,
    DurationOverflowError,
    DurationSyntaxError,
    ErrorPayload,
    LiteralSyntaxError,
    ScheduleConfigError,
    build_error_payload,
)
from unitduration._literal import (
    DURATION_TAG,
    LiteralRegistry,
    TaggedLiteral,
    default_registry,
    find_literals,
    from_literal,
    read_literals,
    replace_literals,
    to_literal,
)
from unitduration._logging import JsonFormatter, configure_logging
from unitduration._scheduler import ScheduleConfig, schedule
from unitduration._settings import LoggingSettings, Settings, TimingSettings
from unitduration._sink import MeasurementSink, measure_to_sink
from unitduration._timing import Timer, measured, timed
from unitduration._units import UNITS, Unit

try:
    __version__ = version("unit-duration")
except PackageNotFoundError:
    # Source checkouts without installed metadata
    __version__ = "0.0.0+unknown"

__all__ = [
    # Version
    "__version__",
    # Duration
    "Duration",
    "MAX_NANOS",
    "UNITS",
    "Unit",
    # Codec
    "decompose",
    "format_duration",
    "normalize_duration",
    "parse_duration",
    # Tagged literals
    "DURATION_TAG",
    "LiteralRegistry",
    "TaggedLiteral",
    "default_registry",
    "find_literals",
    "from_literal",
    "read_literals",
    "replace_literals",
    "to_literal",
    # Errors
    "DurationError",
    "DurationOverflowError",
    "DurationSyntaxError",
    "LiteralSyntaxError",
    "ScheduleConfigError",
    "ErrorPayload",
    "build_error_payload",
    # Clock
    "ClockPort",
    "SystemClock",
    # Timing
    "Timer",
    "measured",
    "timed",
    # Measurement sink
    "MeasurementSink",
    "measure_to_sink",
    # Scheduling
    "ScheduleConfig",
    "schedule",
    # Logging
    "JsonFormatter",
    "configure_logging",
    # Settings
    "LoggingSettings",
    "Settings",
    "TimingSettings",
]
