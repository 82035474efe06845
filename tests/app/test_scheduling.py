from __future__ import annotations

import asyncio

import pytest

from choreosync.scheduling import ScheduledTaskRunner


def test_invalid_schedule_is_rejected() -> None:
    async def task() -> None:
        return None

    with pytest.raises(ValueError, match="positive"):
        ScheduledTaskRunner(task, frequency_seconds=0, timeout_seconds=1)


def test_run_forever_ticks_until_limit() -> None:
    runs: list[int] = []

    async def task() -> int:
        runs.append(len(runs))
        return len(runs)

    runner = ScheduledTaskRunner(task, frequency_seconds=0.01, timeout_seconds=1)

    asyncio.run(runner.run_forever(max_ticks=3))

    assert runs == [0, 1, 2]


def test_failing_tick_does_not_stop_schedule() -> None:
    attempts: list[int] = []

    async def task() -> None:
        attempts.append(1)
        raise RuntimeError("upstream down")

    runner = ScheduledTaskRunner(task, frequency_seconds=0.01, timeout_seconds=1)

    asyncio.run(runner.run_forever(max_ticks=2))

    assert len(attempts) == 2


def test_tick_timeout_returns_none() -> None:
    async def slow() -> str:
        await asyncio.sleep(1)
        return "done"

    runner = ScheduledTaskRunner(slow, frequency_seconds=1, timeout_seconds=0.01)

    assert asyncio.run(runner.trigger()) is None


def test_trigger_waits_for_running_tick() -> None:
    order: list[str] = []

    async def task() -> str:
        order.append("start")
        await asyncio.sleep(0.01)
        order.append("end")
        return "ok"

    runner = ScheduledTaskRunner(task, frequency_seconds=1, timeout_seconds=1)

    async def scenario() -> list[str | None]:
        first = asyncio.create_task(runner.trigger())
        await asyncio.sleep(0)
        assert runner.is_running_tick
        second = await runner.trigger()
        return [await first, second]

    assert asyncio.run(scenario()) == ["ok", "ok"]
    assert order == ["start", "end", "start", "end"]


def test_stop_ends_schedule() -> None:
    ticks: list[int] = []
    runner: ScheduledTaskRunner[None]

    async def task() -> None:
        ticks.append(1)
        runner.stop()

    runner = ScheduledTaskRunner(task, frequency_seconds=60, timeout_seconds=1)

    asyncio.run(runner.run_forever())

    assert ticks == [1]


def test_run_forever_rejects_non_positive_tick_limit() -> None:
    runs: list[int] = []

    async def task() -> None:
        runs.append(1)

    runner = ScheduledTaskRunner(task, frequency_seconds=0.01, timeout_seconds=1)

    with pytest.raises(ValueError, match="max_ticks"):
        asyncio.run(runner.run_forever(max_ticks=0))
    assert runs == []
