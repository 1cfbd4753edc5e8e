"""Unit table for the duration mixed-radix number system.

Eight fixed units, ordered largest to smallest.  Every unit except
:attr:`Unit.YEAR` has a *wrap value*: the count of that unit equal to
one of the next-larger unit::

    Y ─365─ D ─24─ h ─60─ m ─60─ s ─1000─ ms ─1000─ µs ─1000─ ns

The table is the single source of truth for ordering, suffixes and
nanosecond scale factors.  Both the parser and the printer in
:mod:`unitduration._codec` iterate it, so the two directions cannot
drift apart.

Calendar effects are ignored on purpose: a year is exactly 365 days, a
day exactly 24 hours, a minute exactly 60 seconds.

Suffixes are case-sensitive.  ``h``/``m`` are lowercase while ``Y``/``D``
are uppercase, so that no two units collide.  The microsecond suffix
uses MICRO SIGN (U+00B5), not GREEK SMALL LETTER MU (U+03BC).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MICRO_SIGN = "µ"


@dataclass(frozen=True, slots=True)
class UnitSpec:
    """Static description of a single unit.

    Attributes:
        suffix: Case-sensitive textual suffix (e.g. ``"ms"``).
        wrap: Count of this unit per next-larger unit, or ``None``
            for the unbounded largest unit.
        nanos: Cumulative scale factor in nanoseconds.
    """

    suffix: str
    wrap: int | None
    nanos: int


_NS = 1
_US = 1000 * _NS
_MS = 1000 * _US
_S = 1000 * _MS
_M = 60 * _S
_H = 60 * _M
_D = 24 * _H
_Y = 365 * _D


class Unit(Enum):
    """The eight duration units, largest first.

    Iterating the enum yields the canonical order used by both the
    parser and the printer.
    """

    YEAR = UnitSpec("Y", None, _Y)
    DAY = UnitSpec("D", 365, _D)
    HOUR = UnitSpec("h", 24, _H)
    MINUTE = UnitSpec("m", 60, _M)
    SECOND = UnitSpec("s", 60, _S)
    MILLISECOND = UnitSpec("ms", 1000, _MS)
    MICROSECOND = UnitSpec(f"{MICRO_SIGN}s", 1000, _US)
    NANOSECOND = UnitSpec("ns", 1000, _NS)

    @property
    def suffix(self) -> str:
        """Textual suffix of the unit."""
        return self.value.suffix

    @property
    def wrap(self) -> int | None:
        """Wrap value, or ``None`` for :attr:`YEAR`."""
        return self.value.wrap

    @property
    def nanos(self) -> int:
        """Length of one unit in nanoseconds."""
        return self.value.nanos


UNITS: tuple[Unit, ...] = tuple(Unit)
"""All units, largest to smallest."""

_BY_SUFFIX: dict[str, Unit] = {unit.suffix: unit for unit in UNITS}


def unit_for_suffix(suffix: str) -> Unit | None:
    """Return the unit with the exact *suffix*, or ``None``.

    Matching is case-sensitive: ``"m"`` is minutes, ``"M"`` is unknown.
    """
    return _BY_SUFFIX.get(suffix)
