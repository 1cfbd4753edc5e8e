"""Public test-support utilities for unitduration.

Re-exports test doubles and factories so that consumer test suites
can import everything from a single ``unitduration.testing`` namespace
instead of reaching into private modules.

Provided symbols:

- :class:`FakeClock`: deterministic nanosecond clock for timing tests.
- :func:`make_settings`: factory for ``Settings`` without ``.env`` files.
"""

from unitduration.testing._clock import FakeClock
from unitduration.testing._settings import make_settings

__all__ = [
    "FakeClock",
    "make_settings",
]
