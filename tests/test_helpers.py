import asyncio

import pytest

from custom_components.tuya_cloud.helpers import (
    Scheduler,
    kelvin_to_mireds,
    remap,
    round_half_up,
    translate_color_name,
)


def test_round_half_up_rounds_ties_away_from_even() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(25.75, 1) == 25.8
    assert round_half_up(-0.4) == 0


def test_remap_interpolates_and_rounds_to_one_decimal() -> None:
    assert remap(50, 0, 100, 0, 1000) == 500
    assert remap(1, 0, 4, 1, 100) == 25.8
    assert remap(250, 153, 500, 0, 100) == 28.0


def test_remap_clamps_outside_source_range() -> None:
    assert remap(-5, 0, 100, 10, 1000) == 10
    assert remap(150, 0, 100, 10, 1000) == 1000


def test_remap_is_monotonic() -> None:
    values = [remap(x, 0, 255, 0, 100) for x in range(-10, 270)]
    assert values == sorted(values)


def test_remap_round_trip_within_rounding_tolerance() -> None:
    for x in range(0, 101, 3):
        there = remap(x, 0, 100, 1, 1000)
        back = remap(there, 1, 1000, 0, 100)
        assert abs(back - x) <= 0.1


def test_remap_degenerate_source_range_returns_lower_target() -> None:
    assert remap(5, 3, 3, 10, 20) == 10


def test_kelvin_to_mireds() -> None:
    assert kelvin_to_mireds(4000) == 250


def test_translate_color_name() -> None:
    assert translate_color_name(50, 0) == "White"
    assert translate_color_name(0, 100) == "Red"
    assert translate_color_name(10, 50) == "Orange"
    assert translate_color_name(50, 100) == "Cyan"
    assert translate_color_name(66, 100) == "Blue"
    assert translate_color_name(100, 100) == "Red"


@pytest.mark.asyncio
async def test_scheduler_runs_plain_and_coroutine_callbacks() -> None:
    scheduler = Scheduler()
    seen = []

    async def _coro(value):
        seen.append(value)

    scheduler.run_after(0, seen.append, "plain")
    scheduler.run_after(0, _coro, "coro")
    await asyncio.sleep(0.05)

    assert sorted(seen) == ["coro", "plain"]


@pytest.mark.asyncio
async def test_scheduler_handle_cancels_callback() -> None:
    scheduler = Scheduler()
    seen = []

    handle = scheduler.run_after(0.01, seen.append, "late")
    handle.cancel()
    await asyncio.sleep(0.05)

    assert seen == []


def test_remap_rejects_missing_or_non_numeric_bounds() -> None:
    with pytest.raises(ValueError):
        remap(None, 0, 100, 0, 1)
    with pytest.raises(ValueError):
        remap(True, 0, 100, 0, 1)
    with pytest.raises(ValueError):
        remap(50, None, None, 0, 1000)
    with pytest.raises(ValueError):
        remap("bright", 0, 100, 0, 1000)


@pytest.mark.asyncio
async def test_scheduler_logs_failed_coroutine(caplog) -> None:
    scheduler = Scheduler()

    async def _boom():
        raise RuntimeError("boom")

    scheduler.run_after(0, _boom)
    await asyncio.sleep(0.05)

    assert "Scheduled task" in caplog.text
    assert any(r.levelname == "ERROR" for r in caplog.records)
    assert scheduler._tasks == set()


@pytest.mark.asyncio
async def test_scheduler_hands_coroutines_to_home_assistant() -> None:
    started = []

    class _Hass:
        def async_create_task(self, coro):
            started.append(coro)

    scheduler = Scheduler(asyncio.get_running_loop(), _Hass())

    async def _coro():
        pass

    scheduler.run_after(0, _coro)
    await asyncio.sleep(0.05)

    assert len(started) == 1
    assert scheduler._tasks == set()
    started[0].close()
