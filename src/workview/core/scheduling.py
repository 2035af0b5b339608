"""Timer primitives for debounced refresh and visibility-bound polling.

Both primitives run on the current asyncio event loop and sleep through an
injected ``Time`` so tests can drive them without waiting.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from workview.core.time.abc import Time

logger = logging.getLogger(__name__)


class FetchState(Enum):
    """Fetch lifecycle of a single provider instance."""

    IDLE = "idle"
    FETCHING = "fetching"
    PENDING_REFRESH = "pending_refresh"


class DelayedTask:
    """One-shot timer with cancel-and-reschedule semantics.

    Every call to ``schedule()`` discards the previously scheduled run, so a
    burst of requests collapses into a single run ``delay_seconds`` after the
    last one.
    """

    def __init__(
        self,
        delay_seconds: float,
        action: Callable[[], Awaitable[None]],
        time: Time,
    ) -> None:
        self._delay_seconds = delay_seconds
        self._action = action
        self._time = time
        self._task: asyncio.Task[None] | None = None

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    @property
    def pending(self) -> bool:
        """True while a scheduled run has not finished."""
        return self._task is not None and not self._task.done()

    def schedule(self) -> None:
        """(Re)start the timer. Must be called with a running event loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        """Drop the scheduled run, if any.

        A run that is already executing its action is left to finish.
        """
        task = self._task
        if task is None:
            return
        self._task = None
        if task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def join(self) -> None:
        """Wait until no run is scheduled, following reschedules."""
        while self._task is not None and not self._task.done():
            await asyncio.wait([self._task])

    async def _run(self) -> None:
        await self._time.sleep(self._delay_seconds)
        await self._action()


class PollingLoop:
    """Fixed-interval ticker armed only while its view is visible."""

    def __init__(
        self,
        interval_seconds: float,
        tick: Callable[[], None],
        time: Time,
    ) -> None:
        self._interval_seconds = interval_seconds
        self._tick = tick
        self._time = time
        self._task: asyncio.Task[None] | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the loop. No-op if already running."""
        if self.running:
            return
        logger.debug("Starting polling every %ss", self._interval_seconds)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Tear the loop down. No-op if not running."""
        task = self._task
        if task is None:
            return
        self._task = None
        if not task.done():
            logger.debug("Stopping polling")
            task.cancel()

    def set_visible(self, visible: bool) -> None:
        """Bind the loop to a view-visibility event."""
        if visible:
            self.start()
        else:
            self.stop()

    async def join(self) -> None:
        """Wait for the current loop task to end (after stop() or cancellation)."""
        task = self._task
        if task is None:
            return
        await asyncio.wait([task])

    async def _run(self) -> None:
        while True:
            await self._time.sleep(self._interval_seconds)
            self._tick()
