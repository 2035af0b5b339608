"""Debounced, cached poller for the worktree view."""

import logging
from dataclasses import replace
from pathlib import Path

from workview.core.cached_provider import CachedProvider
from workview.core.errors import ToolError, ToolMissingError
from workview.core.exec.abc import DEFAULT_TIMEOUT_SECONDS, CommandRunner
from workview.core.scheduling import DelayedTask
from workview.core.time.abc import Time
from workview.core.tools import INSTALL_CHECK_TIMEOUT_SECONDS, MissingToolNotice
from workview.core.user_feedback import UserFeedback
from workview.core.worktrees.parsing import (
    enrich_worktree,
    find_status_match,
    parse_diff_summary,
    parse_worktree_list,
    parse_worktree_status,
    sort_worktrees,
    worktree_fingerprint,
)
from workview.core.worktrees.types import WorkingTree, WorktreeSnapshot, WorktreeStatusEntry

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3
DEFAULT_POLL_INTERVAL_SECONDS = 5.0


class WorktreeProvider(CachedProvider[WorktreeSnapshot]):
    """Keeps an enriched, sorted worktree snapshot for one workspace.

    ``refresh()`` restarts a short debounce timer; when it fires, one
    background fetch runs (or is marked pending if another is in flight).
    A failed listing yields a header-only snapshot rather than an error.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        time: Time,
        feedback: UserFeedback,
        workspace: Path,
        tool: str = "gwt",
        git: str = "git",
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        command_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        install_check_timeout_seconds: float = INSTALL_CHECK_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(
            runner=runner,
            time=time,
            workspace=workspace,
            tool=tool,
            poll_interval_seconds=poll_interval_seconds,
            command_timeout_seconds=command_timeout_seconds,
            install_check_timeout_seconds=install_check_timeout_seconds,
        )
        self._git = git
        self._notice = MissingToolNotice(tool, feedback, view_name="Worktrees")
        self._debounce = DelayedTask(debounce_seconds, self._on_debounce_elapsed, time)

    def refresh(self) -> None:
        if self._disposed:
            return
        self._debounce.schedule()

    def set_tool_installed(self, installed: bool) -> None:
        if installed:
            self._notice.report_present()
        super().set_tool_installed(installed)

    async def _on_debounce_elapsed(self) -> None:
        self._request_fetch()

    def _cancel_timers(self) -> None:
        self._debounce.cancel()

    async def _join_timers(self) -> None:
        await self._debounce.join()

    def _timers_pending(self) -> bool:
        return self._debounce.pending

    def _fingerprint_of(self, snapshot: WorktreeSnapshot) -> str:
        return worktree_fingerprint(snapshot)

    async def _fetch(self) -> WorktreeSnapshot:
        tool_version = await self._ensure_tool_version()
        header_only = WorktreeSnapshot(tool_version=tool_version, worktrees=(), listing_ok=False)

        try:
            result = await self._runner.run(
                self._git,
                ["worktree", "list", "--porcelain"],
                self._workspace,
                timeout_seconds=self._command_timeout_seconds,
            )
        except ToolError as e:
            logger.debug("Worktree listing failed: %s", e)
            return header_only
        if not result.ok:
            logger.debug("Worktree listing exited %d: %s", result.exit_code, result.stderr.strip())
            return header_only

        worktrees = parse_worktree_list(result.stdout)
        entries = await self._fetch_status()

        enriched: list[WorkingTree] = []
        for worktree in worktrees:
            if entries is not None:
                match = find_status_match(entries, worktree)
                if match is not None:
                    worktree = enrich_worktree(worktree, match)
            if not worktree.is_main and not worktree.is_detached and not worktree.is_bare:
                summary = await self._fetch_diff_summary(worktree.short_branch)
                worktree = replace(worktree, diff_summary=summary)
            enriched.append(worktree)

        return WorktreeSnapshot(
            tool_version=tool_version,
            worktrees=tuple(sort_worktrees(enriched)),
        )

    async def _fetch_status(self) -> list[WorktreeStatusEntry] | None:
        try:
            result = await self._runner.run(
                self._tool,
                ["status", "--json"],
                self._workspace,
                timeout_seconds=self._command_timeout_seconds,
            )
        except ToolMissingError:
            self._notice.report_missing()
            return None
        except ToolError as e:
            logger.debug("Worktree status failed: %s", e)
            return None

        self._notice.report_present()
        if not result.ok:
            logger.debug("Worktree status exited %d", result.exit_code)
            return None
        return parse_worktree_status(result.stdout)

    async def _fetch_diff_summary(self, branch: str) -> str:
        try:
            result = await self._runner.run(
                self._git,
                ["diff", "--stat", "--shortstat", f"HEAD...{branch}"],
                self._workspace,
                timeout_seconds=self._command_timeout_seconds,
            )
        except ToolError as e:
            logger.debug("Diff summary for %s failed: %s", branch, e)
            return ""
        if not result.ok:
            return ""
        return parse_diff_summary(result.stdout)
