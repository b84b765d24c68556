"""Poll scheduler — periodic silent refresh plus on-demand refresh when the tab is foregrounded."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from app.infrastructure.logging.colored_logger import DashboardLogger, DashboardStage

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Awaitable[Any]]


class SchedulerState(str, Enum):
    """Lifecycle states of the poll scheduler."""

    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    STOPPED = "stopped"


class PollScheduler:
    """Re-runs a silent refresh on a fixed interval without ever overlapping itself.

    The next timer is armed only after the previous scheduled refresh settles,
    so at most one scheduled refresh is in flight. Visibility-triggered
    refreshes run outside that cadence and may overlap a scheduled one.

    Use as an async context manager so the timer is released on every exit path:

        async with PollScheduler(poll, refresh_now=refresh) as scheduler:
            ...
    """

    def __init__(
        self,
        poll: RefreshCallback,
        *,
        refresh_now: RefreshCallback | None = None,
        interval_seconds: float = 30.0,
    ) -> None:
        self._poll = poll
        self._refresh_now = refresh_now or poll
        self._interval = interval_seconds
        self._state = SchedulerState.IDLE
        self._timer: asyncio.TimerHandle | None = None
        self._poll_task: asyncio.Task | None = None
        self._immediate_tasks: set[asyncio.Task] = set()
        self._log = DashboardLogger("PollScheduler")

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def start(self) -> None:
        """Arm the first timer. Only valid once, from the IDLE state."""
        if self._state is not SchedulerState.IDLE:
            raise RuntimeError(f"PollScheduler cannot start from state '{self._state.value}'")
        self._arm()
        self._log.step_start(
            DashboardStage.POLL, "Polling started", interval=f"{self._interval:g}s"
        )

    def stop(self) -> None:
        """Cancel the armed timer; an in-flight refresh is left to complete."""
        if self._state is SchedulerState.STOPPED:
            return
        self._state = SchedulerState.STOPPED
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._log.step_complete(DashboardStage.POLL, "Polling stopped")

    def on_visibility_regained(self) -> asyncio.Task | None:
        """The dashboard tab was foregrounded: refresh right away."""
        self._log.detail("Tab is now visible, fetching fresh data")
        return self.trigger()

    def trigger(self) -> asyncio.Task | None:
        """Start an immediate non-silent refresh outside the regular cadence.

        The armed timer is left untouched. Returns the refresh task, or None
        when the scheduler has already been stopped.
        """
        if self._state is SchedulerState.STOPPED:
            logger.debug("Ignoring refresh trigger after stop")
            return None
        task = asyncio.create_task(self._run(self._refresh_now, "Immediate refresh"))
        self._immediate_tasks.add(task)
        task.add_done_callback(self._immediate_tasks.discard)
        return task

    async def __aenter__(self) -> "PollScheduler":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.stop()

    def _arm(self) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._interval, self._fire)
        self._state = SchedulerState.SCHEDULED

    def _fire(self) -> None:
        self._timer = None
        if self._state is not SchedulerState.SCHEDULED:
            return
        self._state = SchedulerState.RUNNING
        self._poll_task = asyncio.create_task(self._run_poll())

    async def _run_poll(self) -> None:
        # Failures are swallowed by _run; only cancellation skips re-arming
        await self._run(self._poll, "Scheduled poll")
        self._poll_task = None
        if self._state is SchedulerState.RUNNING:
            self._arm()

    async def _run(self, refresh: RefreshCallback, label: str) -> None:
        try:
            await refresh()
        except Exception:
            logger.exception("%s failed", label)
