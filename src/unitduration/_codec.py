"""Canonical text codec for :class:`~unitduration._duration.Duration`.

Grammar (order-sensitive, anchored)::

    duration := "" | segment (" " segment)*
    segment  := digit+ suffix
    suffix   := "Y" | "D" | "h" | "m" | "s" | "ms" | "µs" | "ns"

Segments appear in strictly largest-to-smallest unit order, each unit at
most once, separated by exactly one ASCII space.  Any unit may be
omitted; the empty string is the zero duration.

The printer emits only units with a positive amount, so a duration of
exactly 90 seconds renders as ``1m 30s`` and zero renders as ``""``.
Both directions iterate :data:`~unitduration._units.UNITS`, which makes
``format_duration(parse_duration(s)) == s`` for every canonical ``s``
and ``parse_duration(format_duration(d)) == d`` for every ``d``.

The parser accepts non-canonical but well-formed input such as
``90s`` or ``05s``; :func:`normalize_duration` maps it to canonical form.
"""

from __future__ import annotations

from unitduration._duration import MAX_NANOS, Duration
from unitduration._errors import DurationOverflowError, DurationSyntaxError
from unitduration._units import UNITS, Unit, unit_for_suffix

_SEPARATOR = " "
_MAX_DIGITS = len(str(MAX_NANOS))

# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _scan_segment(segment: str, text: str) -> tuple[int, Unit]:
    """Split one ``<digits><suffix>`` segment into amount and unit."""
    end = 0
    while end < len(segment) and "0" <= segment[end] <= "9":
        end += 1
    digits, suffix = segment[:end], segment[end:]
    unit = unit_for_suffix(suffix)
    if not digits or unit is None:
        raise DurationSyntaxError(text)
    # int() refuses very long digit strings, leading zeros included.
    significant = digits.lstrip("0")
    if len(significant) > _MAX_DIGITS:
        msg = f"amount {digits}{suffix} out of range in: {text}"
        raise DurationOverflowError(msg, text=text)
    return int(significant or "0"), unit


def parse_duration(text: str) -> Duration:
    """Decode *text* into a :class:`Duration`.

    Walks the unit table in order and consumes the next segment whenever
    its suffix names the current unit.  Segments left over after the
    walk were out of order, duplicated or unknown.

    Args:
        text: Duration string such as ``"1D 10h 17m 36s"``.

    Returns:
        The decoded duration.

    Raises:
        TypeError: If *text* is not a ``str``.
        DurationSyntaxError: If *text* does not match the grammar.
        DurationOverflowError: If an amount or the total exceeds
            :data:`~unitduration._duration.MAX_NANOS`.
    """
    if not isinstance(text, str):
        msg = f"expected str, got {type(text).__name__}"
        raise TypeError(msg)
    if text == "":
        return Duration.ZERO

    segments = [_scan_segment(segment, text) for segment in text.split(_SEPARATOR)]

    total = 0
    position = 0
    for unit in UNITS:
        if position == len(segments):
            break
        amount, segment_unit = segments[position]
        if segment_unit is not unit:
            continue
        total += amount * unit.nanos
        position += 1

    if position != len(segments):
        raise DurationSyntaxError(text)
    if total > MAX_NANOS:
        msg = f"duration exceeds the maximum of {MAX_NANOS}ns: {text}"
        raise DurationOverflowError(msg, text=text)
    return Duration(total)


# ---------------------------------------------------------------------------
# Printer
# ---------------------------------------------------------------------------


def decompose(duration: Duration) -> tuple[tuple[Unit, int], ...]:
    """Split *duration* into one amount per unit, largest unit first.

    Mixed-radix decomposition, smallest unit first: each step takes
    ``divmod`` by the unit's wrap value; the unbounded year takes
    whatever remains.  Integer-only, hence exact.
    """
    remaining = duration.nanos
    amounts: list[tuple[Unit, int]] = []
    for unit in reversed(UNITS):
        if unit.wrap is None:
            amounts.append((unit, remaining))
        else:
            remaining, amount = divmod(remaining, unit.wrap)
            amounts.append((unit, amount))
    amounts.reverse()
    return tuple(amounts)


def format_duration(duration: Duration) -> str:
    """Encode *duration* as its unique canonical string.

    Units with a zero amount are omitted; the zero duration is ``""``.

    Raises:
        TypeError: If *duration* is not a :class:`Duration`.
    """
    if not isinstance(duration, Duration):
        msg = f"expected Duration, got {type(duration).__name__}"
        raise TypeError(msg)
    return _SEPARATOR.join(
        f"{amount}{unit.suffix}" for unit, amount in decompose(duration) if amount
    )


def normalize_duration(text: str) -> str:
    """Return the canonical form of a well-formed duration string.

    ``normalize_duration("90s") == "1m 30s"``.
    """
    return format_duration(parse_duration(text))
