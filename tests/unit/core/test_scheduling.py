"""Tests for the debounce and polling timer primitives."""

import asyncio

import pytest

from tests.fakes.time import FakeTime
from workview.core.scheduling import DelayedTask, PollingLoop


@pytest.mark.asyncio
async def test_delayed_task_runs_after_delay() -> None:
    """Test that a scheduled action runs once after sleeping the delay."""
    # Arrange
    time = FakeTime()
    runs: list[int] = []

    async def action() -> None:
        runs.append(1)

    task = DelayedTask(0.3, action, time)

    # Act
    task.schedule()
    await task.join()

    # Assert
    assert runs == [1]
    assert time.sleep_calls == [0.3]
    assert not task.pending


@pytest.mark.asyncio
async def test_delayed_task_burst_collapses_to_one_run() -> None:
    """Test that rescheduling before the delay elapses discards earlier runs."""
    time = FakeTime()
    runs: list[int] = []

    async def action() -> None:
        runs.append(1)

    task = DelayedTask(0.3, action, time)

    for _ in range(5):
        task.schedule()
    await task.join()

    assert runs == [1]


@pytest.mark.asyncio
async def test_delayed_task_cancel_prevents_run() -> None:
    """Test that cancel drops a scheduled run."""
    time = FakeTime()
    runs: list[int] = []

    async def action() -> None:
        runs.append(1)

    task = DelayedTask(0.3, action, time)
    task.schedule()
    task.cancel()
    await task.join()
    await asyncio.sleep(0)

    assert runs == []
    assert not task.pending


@pytest.mark.asyncio
async def test_delayed_task_action_may_reschedule_itself() -> None:
    """Test that scheduling from inside the action does not cancel the running action."""
    time = FakeTime()
    runs: list[int] = []
    holder: list[DelayedTask] = []

    async def action() -> None:
        runs.append(1)
        if len(runs) == 1:
            holder[0].schedule()

    task = DelayedTask(0.1, action, time)
    holder.append(task)
    task.schedule()
    await task.join()

    assert runs == [1, 1]
    assert time.sleep_calls == [0.1, 0.1]


@pytest.mark.asyncio
async def test_polling_loop_ticks_until_stopped() -> None:
    """Test that the loop ticks each interval and stops cleanly."""
    time = FakeTime()
    ticks: list[int] = []
    done = asyncio.Event()
    loop: list[PollingLoop] = []

    def tick() -> None:
        ticks.append(1)
        if len(ticks) == 3:
            loop[0].stop()
            done.set()

    polling = PollingLoop(5.0, tick, time)
    loop.append(polling)

    polling.start()
    assert polling.running
    await done.wait()
    await polling.join()

    assert len(ticks) == 3
    assert not polling.running
    assert set(time.sleep_calls) == {5.0}


@pytest.mark.asyncio
async def test_polling_loop_set_visible_is_idempotent() -> None:
    """Test that repeated visibility events neither duplicate nor leak loops."""
    time = FakeTime()
    polling = PollingLoop(5.0, lambda: None, time)

    polling.set_visible(True)
    polling.set_visible(True)
    assert polling.running

    polling.set_visible(False)
    polling.set_visible(False)
    await asyncio.sleep(0)

    assert not polling.running
