"""Exception hierarchy and structured error payloads.

All failures raised by the package derive from :class:`DurationError`.
The concrete classes also inherit from the matching builtin
(``ValueError`` / ``OverflowError``) so callers that only know the
standard library still catch them naturally::

    DurationError
    ├── DurationSyntaxError      (ValueError)
    │   └── LiteralSyntaxError
    ├── DurationOverflowError    (OverflowError)
    └── ScheduleConfigError      (ValueError)

Failures are pure: the parser either returns a complete duration or
raises without side effects.  There is no retry policy; a rejected
string is rejected deterministically.

For machine consumers (the ``--json`` CLI mode) exceptions are turned
into :class:`ErrorPayload` objects with a stable ``error_type`` string.

Payload schema::

    {
        "error_type": "syntax",
        "message": "unrecognized duration syntax: 30s 1m",
        "input": "30s 1m" | null,
        "timestamp": "2026-02-14T12:34:56+00:00",
        "details": {}
    }
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DurationError(Exception):
    """Base class for every error raised by unitduration."""


class DurationSyntaxError(DurationError, ValueError):
    """Input text does not match the duration grammar.

    Attributes:
        text: The offending input string.
    """

    prefix = "unrecognized duration syntax"

    def __init__(self, text: str) -> None:
        super().__init__(f"{self.prefix}: {text}")
        self.text = text


class LiteralSyntaxError(DurationSyntaxError):
    """Malformed tagged literal, or a tag with no registered codec."""

    prefix = "unrecognized tagged literal"


class DurationOverflowError(DurationError, OverflowError):
    """An amount or total exceeds the supported nanosecond range.

    Attributes:
        text: The input being parsed, or ``None`` when the overflow
            came from arithmetic or a constructor.
    """

    def __init__(self, message: str, *, text: str | None = None) -> None:
        super().__init__(message)
        self.text = text


class ScheduleConfigError(DurationError, ValueError):
    """Invalid scheduler configuration, detected before submission."""


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

DEFAULT_ERROR_TYPES: dict[type[Exception], str] = {
    DurationSyntaxError: "syntax",
    LiteralSyntaxError: "literal",
    DurationOverflowError: "overflow",
    ScheduleConfigError: "config",
}


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Immutable structured error payload.

    Represents a single failure ready for JSON serialisation.
    """

    error_type: str
    message: str
    input: str | None
    timestamp: str
    details: dict[str, object] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialise to a JSON string."""
        return json.dumps(asdict(self), ensure_ascii=False)


# ---------------------------------------------------------------------------
# Payload builder
# ---------------------------------------------------------------------------


def build_error_payload(
    error: Exception,
    *,
    error_type_map: dict[type[Exception], str] | None = None,
    details: dict[str, object] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ErrorPayload:
    """Convert an exception into a structured :class:`ErrorPayload`.

    Looks up the exact class of the exception; subclasses are not
    matched.

    Args:
        error: The exception to convert.
        error_type_map: Mapping from exception types to machine-readable
            ``error_type`` strings.  Defaults to
            :data:`DEFAULT_ERROR_TYPES`.  Unmapped types fall back to
            ``"error"``.
        details: Optional dict of additional context.
        clock: Optional callable returning a :class:`~datetime.datetime`.
            Defaults to ``datetime.now(UTC)``.

    Returns:
        A frozen dataclass ready for serialisation.
    """
    resolved_map = DEFAULT_ERROR_TYPES if error_type_map is None else error_type_map
    error_type = resolved_map.get(type(error), "error")
    now = clock() if clock is not None else datetime.now(UTC)
    return ErrorPayload(
        error_type=error_type,
        message=str(error),
        input=getattr(error, "text", None),
        timestamp=now.isoformat(),
        details=details or {},
    )
