"""Unit tests for the PollScheduler."""

import asyncio

import pytest

from app.application.services import PollScheduler, SchedulerState


class CountingRefresh:
    """Refresh callback that records calls and the peak number in flight."""

    def __init__(self, duration: float = 0.0, error: Exception | None = None):
        self.duration = duration
        self.error = error
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self) -> None:
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.duration)
            if self.error is not None:
                raise self.error
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
async def test_polls_repeatedly_on_the_interval():
    poll = CountingRefresh()
    async with PollScheduler(poll, interval_seconds=0.01) as scheduler:
        assert scheduler.state is SchedulerState.SCHEDULED
        await asyncio.sleep(0.1)

    assert poll.calls >= 2
    assert scheduler.state is SchedulerState.STOPPED


@pytest.mark.asyncio
async def test_slow_poll_never_overlaps_the_next_one():
    """A poll that outlasts the interval delays the next one instead of overlapping."""
    poll = CountingRefresh(duration=0.03)
    async with PollScheduler(poll, interval_seconds=0.005):
        await asyncio.sleep(0.2)

    assert poll.calls >= 2
    assert poll.max_in_flight == 1


@pytest.mark.asyncio
async def test_failing_poll_keeps_the_schedule_alive():
    poll = CountingRefresh(error=RuntimeError("backend down"))
    async with PollScheduler(poll, interval_seconds=0.01):
        await asyncio.sleep(0.1)

    assert poll.calls >= 2


@pytest.mark.asyncio
async def test_stop_during_inflight_poll_prevents_rearm():
    release = asyncio.Event()
    started = asyncio.Event()
    calls = 0

    async def poll() -> None:
        nonlocal calls
        calls += 1
        started.set()
        await release.wait()

    scheduler = PollScheduler(poll, interval_seconds=0.01)
    scheduler.start()
    await asyncio.wait_for(started.wait(), timeout=1)
    assert scheduler.state is SchedulerState.RUNNING

    scheduler.stop()
    release.set()
    await asyncio.sleep(0.05)

    assert calls == 1
    assert scheduler.state is SchedulerState.STOPPED


@pytest.mark.asyncio
async def test_start_is_only_valid_once():
    scheduler = PollScheduler(CountingRefresh(), interval_seconds=10)
    scheduler.start()
    with pytest.raises(RuntimeError):
        scheduler.start()

    scheduler.stop()
    scheduler.stop()
    with pytest.raises(RuntimeError):
        scheduler.start()


@pytest.mark.asyncio
async def test_visibility_triggers_immediate_refresh_without_touching_timer():
    poll = CountingRefresh()
    refresh_now = CountingRefresh()

    async with PollScheduler(poll, refresh_now=refresh_now, interval_seconds=10) as scheduler:
        task = scheduler.on_visibility_regained()
        await task
        assert scheduler.state is SchedulerState.SCHEDULED

    assert refresh_now.calls == 1
    assert poll.calls == 0


@pytest.mark.asyncio
async def test_trigger_after_stop_is_ignored():
    refresh_now = CountingRefresh()
    scheduler = PollScheduler(CountingRefresh(), refresh_now=refresh_now, interval_seconds=10)
    scheduler.start()
    scheduler.stop()

    assert scheduler.trigger() is None
    assert refresh_now.calls == 0


@pytest.mark.asyncio
async def test_context_manager_stops_on_error():
    scheduler = PollScheduler(CountingRefresh(), interval_seconds=10)
    with pytest.raises(ValueError):
        async with scheduler:
            raise ValueError("page closed")

    assert scheduler.state is SchedulerState.STOPPED
