"""Data models for git worktrees and their live status."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WorkingTree:
    """One checkout reported by ``git worktree list --porcelain``.

    Enrichment fields stay None until a status source fills them in; they
    remain None for the whole cycle when that source fails.
    """

    path: Path
    branch: str
    short_branch: str
    head: str
    is_bare: bool = False
    is_main: bool = False
    is_detached: bool = False
    is_gwt: bool = False
    agent_running: bool | None = None
    agent_pid: int | None = None
    has_changes: bool | None = None
    diff_summary: str | None = None


@dataclass(frozen=True)
class WorktreeStatusEntry:
    """One row of the worktree tool's ``status --json`` document."""

    branch: str
    path: str
    head: str
    is_gwt: bool
    is_main: bool
    has_changes: bool
    agent_running: bool
    agent_pid: int | None


@dataclass(frozen=True)
class WorktreeSnapshot:
    """Everything the worktree view renders for one poll cycle.

    Attributes:
        tool_version: Output of ``<tool> --version`` or "" if unavailable
        worktrees: Enriched and sorted worktrees
        listing_ok: False when the listing command failed this cycle
    """

    tool_version: str
    worktrees: tuple[WorkingTree, ...]
    listing_ok: bool = True
