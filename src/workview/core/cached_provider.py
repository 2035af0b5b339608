"""Snapshot cache shared by the worktree and pipeline providers.

A provider owns one cached snapshot, the fingerprint of that snapshot, and a
tri-state fetch status. Nothing is shared between instances, so providers for
different workspaces never interfere.

Lifecycle of a background fetch::

    IDLE --request--> FETCHING --done--> IDLE
                         |
                      request
                         v
                   PENDING_REFRESH --done--> IDLE, then refresh() once more

A completed fetch replaces the cache and notifies listeners only when its
fingerprint differs from the cached one.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Generic, TypeVar

from workview.core.exec.abc import CommandRunner
from workview.core.scheduling import FetchState, PollingLoop
from workview.core.time.abc import Time
from workview.core.tools import fetch_tool_version

logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT")

ChangeListener = Callable[[], None]


class CachedProvider(ABC, Generic[SnapshotT]):
    """Base class for providers that poll an external tool into a cached snapshot.

    Subclasses implement ``refresh()`` (how a refresh request is scheduled),
    ``_fetch()`` (one full fetch that never raises ToolError), and
    ``_fingerprint_of()``.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        time: Time,
        workspace: Path,
        tool: str,
        poll_interval_seconds: float,
        command_timeout_seconds: float,
        install_check_timeout_seconds: float,
    ) -> None:
        self._runner = runner
        self._time = time
        self._workspace = workspace
        self._tool = tool
        self._command_timeout_seconds = command_timeout_seconds
        self._install_check_timeout_seconds = install_check_timeout_seconds

        self._snapshot: SnapshotT | None = None
        self._fingerprint = ""
        self._state = FetchState.IDLE
        self._fetch_task: asyncio.Task[None] | None = None
        self._listeners: list[ChangeListener] = []
        self._tool_version = ""
        self._tool_installed = True
        self._disposed = False
        self._polling = PollingLoop(poll_interval_seconds, self.refresh, time)

    @property
    def workspace(self) -> Path:
        return self._workspace

    @property
    def tool(self) -> str:
        return self._tool

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def cached_snapshot(self) -> SnapshotT | None:
        """The last stored snapshot, without triggering any fetch."""
        return self._snapshot

    @property
    def tool_installed(self) -> bool:
        return self._tool_installed

    @property
    def polling(self) -> bool:
        return self._polling.running

    def on_change(self, listener: ChangeListener) -> None:
        """Register a callback fired whenever the cached data changes."""
        self._listeners.append(listener)

    @abstractmethod
    def refresh(self) -> None:
        """Request fresh data without blocking the caller."""
        ...

    async def get_snapshot(self) -> SnapshotT:
        """Return the cached snapshot, fetching eagerly on first access."""
        if self._snapshot is not None:
            return self._snapshot
        snapshot = await self._fetch()
        if self._snapshot is None:
            self._snapshot = snapshot
            self._fingerprint = self._fingerprint_of(snapshot)
        return self._snapshot

    def force_refresh(self) -> None:
        """Drop the cache and fingerprint and notify listeners.

        The next ``get_snapshot()`` fetches again, and the next background
        fetch is guaranteed to count as a change.
        """
        self._snapshot = None
        self._fingerprint = ""
        self._notify()

    def set_tool_installed(self, installed: bool) -> None:
        self._tool_installed = installed
        self.force_refresh()

    def set_visible(self, visible: bool) -> None:
        """Arm polling while the consuming view is visible; tear it down otherwise."""
        if self._disposed:
            return
        self._polling.set_visible(visible)

    def dispose(self) -> None:
        """Stop all scheduled work. Results of an in-flight fetch are discarded."""
        self._disposed = True
        self._polling.stop()
        self._cancel_timers()
        self._listeners.clear()

    async def wait_idle(self) -> None:
        """Wait until no timer is scheduled and no fetch is in flight."""
        while True:
            await self._join_timers()
            task = self._fetch_task
            if task is not None and not task.done():
                await asyncio.wait([task])
                continue
            if not self._timers_pending():
                return

    def _request_fetch(self) -> None:
        """Start a background fetch, or mark one pending if a fetch is in flight.

        Nothing runs while the tool is marked not installed; the view shows
        the install hint instead.
        """
        if self._disposed:
            return
        if not self._tool_installed:
            logger.debug("%s not installed; skipping background fetch", self._tool)
            return
        if self._state is not FetchState.IDLE:
            logger.debug("Fetch in flight for %s; marking refresh pending", self._tool)
            self._state = FetchState.PENDING_REFRESH
            return
        self._state = FetchState.FETCHING
        self._fetch_task = asyncio.get_running_loop().create_task(self._run_fetch())

    async def _run_fetch(self) -> None:
        try:
            snapshot = await self._fetch()
            if not self._disposed:
                self._store(snapshot)
        finally:
            rerun = self._state is FetchState.PENDING_REFRESH
            self._state = FetchState.IDLE
        if rerun and not self._disposed:
            self.refresh()

    def _store(self, snapshot: SnapshotT) -> None:
        fingerprint = self._fingerprint_of(snapshot)
        if fingerprint == self._fingerprint:
            logger.debug("No change for %s", self._tool)
            return
        self._snapshot = snapshot
        self._fingerprint = fingerprint
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    async def _ensure_tool_version(self) -> str:
        """Look up the tool version until one is found, then reuse it."""
        if not self._tool_version:
            self._tool_version = await fetch_tool_version(
                self._runner,
                self._tool,
                self._workspace,
                timeout_seconds=self._install_check_timeout_seconds,
            )
        return self._tool_version

    def _cancel_timers(self) -> None:
        pass

    async def _join_timers(self) -> None:
        pass

    def _timers_pending(self) -> bool:
        return False

    @abstractmethod
    async def _fetch(self) -> SnapshotT:
        """Run the external tools once and build a snapshot. Must not raise ToolError."""
        ...

    @abstractmethod
    def _fingerprint_of(self, snapshot: SnapshotT) -> str: ...
