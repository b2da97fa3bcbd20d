import asyncio
import gc

import pytest

from pirain.scheduler import RainScheduler


def test_initial_state_is_stopped():
    scheduler = RainScheduler()
    assert not scheduler.running
    assert scheduler.interval is None


def test_ticks_until_stopped():
    ticks = []

    async def scenario():
        scheduler = RainScheduler()
        scheduler.start(10, lambda: ticks.append(1))
        assert scheduler.running
        assert scheduler.interval == 10
        await asyncio.sleep(0.15)
        scheduler.stop()
        seen = len(ticks)
        await asyncio.sleep(0.1)
        return seen

    seen = asyncio.run(scenario())
    assert seen >= 3
    assert len(ticks) == seen


def test_stop_right_after_start_never_ticks():
    ticks = []

    async def scenario():
        scheduler = RainScheduler()
        scheduler.start(500, lambda: ticks.append(1))
        scheduler.stop()
        assert not scheduler.running
        assert scheduler.interval is None
        await asyncio.sleep(0.6)

    asyncio.run(scenario())
    assert ticks == []


def test_stop_from_inside_a_tick_is_the_last_tick():
    ticks = []

    async def scenario():
        scheduler = RainScheduler()

        def on_tick():
            ticks.append(1)
            scheduler.stop()

        scheduler.start(10, on_tick)
        await asyncio.sleep(0.1)
        return scheduler.running

    assert asyncio.run(scenario()) is False
    assert ticks == [1]


def test_restart_replaces_previous_schedule():
    first, second = [], []

    async def scenario():
        scheduler = RainScheduler()
        scheduler.start(500, lambda: first.append(1))
        scheduler.start(10, lambda: second.append(1))
        assert scheduler.interval == 10
        await asyncio.sleep(0.6)
        scheduler.stop()

    asyncio.run(scenario())
    assert first == []
    assert len(second) >= 3


def test_stop_is_idempotent():
    async def scenario():
        scheduler = RainScheduler()
        scheduler.stop()
        scheduler.start(10, lambda: None)
        scheduler.stop()
        scheduler.stop()
        return scheduler.running

    assert asyncio.run(scenario()) is False


@pytest.mark.parametrize("period", [0, -5, True, "500", None])
def test_start_rejects_invalid_period(period):
    async def scenario():
        scheduler = RainScheduler()
        with pytest.raises(ValueError):
            scheduler.start(period, lambda: None)
        assert not scheduler.running

    asyncio.run(scenario())


def test_start_requires_running_loop():
    scheduler = RainScheduler()
    with pytest.raises(RuntimeError):
        scheduler.start(10, lambda: None)
    assert not scheduler.running


def test_async_context_releases_timer():
    ticks = []

    async def scenario():
        async with RainScheduler() as scheduler:
            scheduler.start(10, lambda: ticks.append(1))
            await asyncio.sleep(0.05)
        assert not scheduler.running
        seen = len(ticks)
        await asyncio.sleep(0.05)
        return seen

    seen = asyncio.run(scenario())
    assert len(ticks) == seen


def test_failing_tick_stops_rain_quietly():
    calls = []
    loop_errors = []

    async def scenario():
        asyncio.get_running_loop().set_exception_handler(
            lambda loop, context: loop_errors.append(context.get("message")))
        scheduler = RainScheduler()

        def on_tick():
            calls.append(1)
            raise RuntimeError("boom")

        scheduler.start(10, on_tick)
        await asyncio.sleep(0.1)
        running = scheduler.running
        await scheduler.aclose()
        gc.collect()
        await asyncio.sleep(0)
        return running

    assert asyncio.run(scenario()) is False
    assert calls == [1]
    assert loop_errors == []
