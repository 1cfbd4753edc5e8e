"""Delayed and periodic task scheduling with :class:`Duration` delays.

A thin adapter over the asyncio event loop.  Three modes:

``once``
    Run the task a single time after ``delay``.
``at-fixed-rate``
    Run after ``initial_delay``, then every ``delay`` measured from the
    *scheduled* start of each run.  Late runs are not run concurrently;
    they start as soon as the previous one finishes.
``with-fixed-delay``
    Run after ``initial_delay``, then wait ``delay`` after each run
    *finishes*.

Delays are converted to whole milliseconds, truncating any
sub-millisecond remainder.  Tasks are zero-argument callables, either
plain or returning an awaitable.

A task that raises is logged and its periodic schedule stops; the error
never reaches the event loop.  :func:`schedule` returns a cancellation
handle; calling it cancels the schedule and interrupts a running
``async`` task at its next ``await``.

Example::

    cancel = schedule(
        schedule="at-fixed-rate",
        task=poll,
        delay=Duration.parse("30s"),
    )
    ...
    cancel()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import Future
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from unitduration._duration import Duration
from unitduration._errors import ScheduleConfigError

logger = logging.getLogger(__name__)

ScheduleMode = Literal["once", "at-fixed-rate", "with-fixed-delay"]

CancelHandle = Callable[[], bool]

_MILLIS_PER_SECOND = 1000

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ScheduleConfig(BaseModel):
    """Validated scheduler options.

    Option names may also be spelled with hyphens (``initial-delay``)
    when passed as a mapping to :func:`schedule`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    schedule: ScheduleMode = Field(description="Execution mode.")
    task: Callable[[], Any] = Field(description="Zero-argument callable to run.")
    delay: Duration = Field(
        description="One-shot delay, or the period/gap of periodic modes.",
    )
    initial_delay: Duration = Field(
        default=Duration.ZERO,
        description="Delay before the first periodic run.",
    )

    @property
    def delay_ms(self) -> int:
        """``delay`` in whole milliseconds (truncated)."""
        return self.delay.to_millis()

    @property
    def initial_delay_ms(self) -> int:
        """``initial_delay`` in whole milliseconds (truncated)."""
        return self.initial_delay.to_millis()


def _coerce_config(
    config: ScheduleConfig | Mapping[str, Any] | None,
    options: dict[str, Any],
) -> ScheduleConfig:
    if isinstance(config, ScheduleConfig):
        if options:
            msg = "Pass either a ScheduleConfig or keyword options, not both"
            raise ScheduleConfigError(msg)
        resolved = config
    else:
        raw = {**(config or {}), **options}
        normalized = {str(key).replace("-", "_"): value for key, value in raw.items()}
        try:
            resolved = ScheduleConfig.model_validate(normalized)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
                for err in exc.errors()
            )
            msg = f"Invalid schedule configuration: {problems}"
            raise ScheduleConfigError(msg) from exc

    if resolved.schedule != "once" and resolved.delay_ms <= 0:
        msg = (
            f"'{resolved.schedule}' needs a delay of at least 1ms, "
            f"got {resolved.delay!r}"
        )
        raise ScheduleConfigError(msg)
    return resolved


# ---------------------------------------------------------------------------
# Runners
# ---------------------------------------------------------------------------


async def _sleep_ms(millis: int) -> None:
    await asyncio.sleep(millis / _MILLIS_PER_SECOND)


async def _invoke(task: Callable[[], Any]) -> bool:
    """Run *task* once; return ``False`` if it raised."""
    try:
        result = task()
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("Scheduled task %r failed", task)
        return False
    return True


async def _run_once(config: ScheduleConfig) -> None:
    await _sleep_ms(config.delay_ms)
    await _invoke(config.task)


async def _run_with_fixed_delay(config: ScheduleConfig) -> None:
    await _sleep_ms(config.initial_delay_ms)
    while await _invoke(config.task):
        await _sleep_ms(config.delay_ms)
    logger.warning("Fixed-delay schedule of %r stopped after failure", config.task)


async def _run_at_fixed_rate(config: ScheduleConfig) -> None:
    loop = asyncio.get_running_loop()
    period = config.delay_ms / _MILLIS_PER_SECOND
    next_run = loop.time() + config.initial_delay_ms / _MILLIS_PER_SECOND
    while True:
        await asyncio.sleep(max(0.0, next_run - loop.time()))
        if not await _invoke(config.task):
            break
        next_run += period
    logger.warning("Fixed-rate schedule of %r stopped after failure", config.task)


_RUNNERS = {
    "once": _run_once,
    "at-fixed-rate": _run_at_fixed_rate,
    "with-fixed-delay": _run_with_fixed_delay,
}

# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def schedule(
    config: ScheduleConfig | Mapping[str, Any] | None = None,
    /,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    **options: Any,
) -> CancelHandle:
    """Schedule a task and return its cancellation handle.

    Configuration is validated before anything is submitted.

    Args:
        config: A :class:`ScheduleConfig` or a mapping of options.
        loop: Event loop to schedule on.  Defaults to the running loop.
            A loop running in another thread is fed thread-safely.
        **options: Options given as keywords (``schedule``, ``task``,
            ``delay``, ``initial_delay``).

    Returns:
        A zero-argument callable cancelling the schedule; it returns
        ``False`` when the schedule had already finished.

    Raises:
        ScheduleConfigError: If a required option is missing, the mode
            is unknown, the task is not callable, or a periodic delay
            truncates to zero milliseconds.
        RuntimeError: If no loop is given and none is running.
    """
    resolved = _coerce_config(config, options)

    try:
        running: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    target = loop if loop is not None else running
    if target is None:
        msg = "schedule() requires a running event loop or an explicit loop"
        raise RuntimeError(msg)

    runner = _RUNNERS[resolved.schedule](resolved)
    name = f"schedule-{resolved.schedule}-{getattr(resolved.task, '__name__', 'task')}"
    future: asyncio.Task[None] | Future[None]
    if target is running:
        future = target.create_task(runner, name=name)
    else:
        future = asyncio.run_coroutine_threadsafe(runner, target)

    logger.debug(
        "Scheduled %s (%s, delay=%dms, initial_delay=%dms)",
        name,
        resolved.schedule,
        resolved.delay_ms,
        resolved.initial_delay_ms,
    )

    def cancel() -> bool:
        return future.cancel()

    return cancel
