"""Helper utilities for the Tuya cloud integration."""

from __future__ import annotations

import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable

_LOGGER = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")

# Upper bound (inclusive) of each 30 degree hue sector
_COLOR_NAMES = (
    (15, "Red"),
    (45, "Orange"),
    (75, "Yellow"),
    (105, "Chartreuse"),
    (135, "Green"),
    (165, "Spring"),
    (195, "Cyan"),
    (225, "Azure"),
    (255, "Blue"),
    (285, "Violet"),
    (315, "Magenta"),
    (345, "Rose"),
    (360, "Red"),
)


def _dec(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    try:
        number = Decimal(str(value))
    except InvalidOperation as ex:
        raise ValueError(f"not a number: {value!r}") from ex
    if not number.is_finite():
        raise ValueError(f"not a number: {value!r}")
    return number


def round_half_up(value: Any, digits: int = 0) -> float:
    """Round like BigDecimal.ROUND_HALF_UP instead of banker's rounding."""
    quantum = Decimal(1).scaleb(-digits)
    return float(_dec(value).quantize(quantum, rounding=ROUND_HALF_UP))


def remap(value: Any, old_min: Any, old_max: Any, new_min: Any, new_max: Any) -> float:
    """Clamp value into [old_min, old_max] and rescale it into [new_min, new_max].

    The result is rounded half-up to one decimal place.
    """
    val = _dec(value)
    lo, hi = _dec(old_min), _dec(old_max)
    out_lo, out_hi = _dec(new_min), _dec(new_max)
    if val < lo:
        val = lo
    if val > hi:
        val = hi
    if hi == lo:
        return float(out_lo)
    scaled = (val - lo) / (hi - lo) * (out_hi - out_lo) + out_lo
    return float(scaled.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def kelvin_to_mireds(kelvin: Any) -> float:
    return 1_000_000 / float(kelvin)


def translate_color_name(hue: int, saturation: int) -> str:
    """Return a human readable color name for a 0-100 hue and saturation."""
    if saturation < 1:
        return "White"
    degrees = int(hue * 3.6)
    if degrees < 0:
        return ""
    for upper, name in _COLOR_NAMES:
        if degrees <= upper:
            return name
    return ""


class Scheduler:
    """Run callbacks after a delay on the event loop.

    ``run_after`` returns the loop's timer handle; calling ``cancel()`` on it
    before it fires drops the callback. Coroutine results are scheduled as
    tasks when the timer fires, through ``hass.async_create_task`` when a
    Home Assistant instance is given.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, hass=None):
        self._loop = loop
        self._hass = hass
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def run_after(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        loop = self.loop

        def _fire() -> None:
            result = callback(*args)
            if asyncio.iscoroutine(result):
                self._start(loop, result)

        _LOGGER.debug("Scheduling %s in %.1fs", getattr(callback, "__name__", callback), delay)
        return loop.call_later(max(0.0, float(delay)), _fire)

    def _start(self, loop: asyncio.AbstractEventLoop, coro) -> None:
        if self._hass is not None:
            self._hass.async_create_task(coro)
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        ex = task.exception()
        if ex is not None:
            _LOGGER.error("Scheduled task %s failed: %s", task.get_coro(), ex, exc_info=ex)
