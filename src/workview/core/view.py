"""View adapter: turns snapshots into visibility-filtered view nodes.

Nodes carry presentation-neutral labels and descriptions; styling is left to
the renderer. Header and daemon nodes are never subject to hiding.
"""

import re
from dataclasses import dataclass

from workview.core.pipeline.reconcile import find_declared
from workview.core.pipeline.types import (
    DaemonInfo,
    DeclaredProcess,
    ManagedProcess,
    PipelineSnapshot,
)
from workview.core.tools import PIPELINE_TOOL_HINT, WORKTREE_TOOL_HINT, InstallHint
from workview.core.visibility import Namespace, VisibilityStore
from workview.core.worktrees.types import WorkingTree, WorktreeSnapshot

NOT_FOUND = "not found"
HIDDEN_PREFIX = "(hidden) "

_FILES_CHANGED = re.compile(r"(\d+) files? changed")
_INSERTIONS = re.compile(r"(\d+) insertion")
_DELETIONS = re.compile(r"(\d+) deletion")


@dataclass(frozen=True)
class HeaderNode:
    title: str
    version: str

    @property
    def description(self) -> str:
        return self.version or NOT_FOUND


@dataclass(frozen=True)
class InstallNode:
    hint: InstallHint

    @property
    def label(self) -> str:
        return f"Install {self.hint.display_name}"


@dataclass(frozen=True)
class DaemonNode:
    daemon: DaemonInfo

    @property
    def description(self) -> str:
        if self.daemon.running:
            return f"running | PID {self.daemon.pid} | {self.daemon.uptime}"
        return "stopped"


@dataclass(frozen=True)
class ProcessNode:
    """A process row. ``declared`` is its configuration entry, if any."""

    process: ManagedProcess
    declared: DeclaredProcess | None
    hidden: bool = False

    @property
    def description(self) -> str:
        description = describe_process(self.process)
        if self.hidden:
            return HIDDEN_PREFIX + description
        return description


@dataclass(frozen=True)
class StageNode:
    """A declared stage with its visible children.

    running_count and total_count cover every process of the stage,
    including hidden ones.
    """

    name: str
    children: tuple[ProcessNode, ...]
    running_count: int
    total_count: int

    @property
    def description(self) -> str:
        return f"{self.running_count}/{self.total_count} running"


@dataclass(frozen=True)
class WorktreeNode:
    worktree: WorkingTree
    hidden: bool = False

    @property
    def label(self) -> str:
        if self.worktree.is_main:
            return f"{self.worktree.short_branch} (main)"
        return self.worktree.short_branch

    @property
    def description(self) -> str:
        description = describe_worktree(self.worktree)
        if self.hidden:
            return HIDDEN_PREFIX + description
        return description


ViewNode = HeaderNode | InstallNode | DaemonNode | StageNode | ProcessNode | WorktreeNode


@dataclass(frozen=True)
class ViewModel:
    """Top-level nodes of one view plus whether it has anything worth showing."""

    nodes: tuple[ViewNode, ...]
    has_content: bool


def describe_process(process: ManagedProcess) -> str:
    parts = [process.status]
    if process.pid:
        parts.append(f"PID {process.pid}")
    if process.uptime:
        parts.append(process.uptime)
    if process.restarts and process.restarts != "0":
        parts.append(f"{process.restarts} restarts")
    return " | ".join(parts)


def summarize_diff(diff_summary: str) -> str | None:
    """Condense "3 files changed, 10 insertions(+), 2 deletions(-)" to "3 files +10 -2"."""
    files = _FILES_CHANGED.search(diff_summary)
    if files is None:
        return None
    insertions = _INSERTIONS.search(diff_summary)
    deletions = _DELETIONS.search(diff_summary)
    stat = " ".join(
        part
        for part in (
            f"+{insertions.group(1)}" if insertions else "",
            f"-{deletions.group(1)}" if deletions else "",
        )
        if part
    )
    return f"{files.group(1)} files {stat}".rstrip()


def describe_worktree(worktree: WorkingTree) -> str:
    parts = [worktree.head[:7]]
    if worktree.agent_running:
        parts.append("agent running")
    if worktree.diff_summary:
        condensed = summarize_diff(worktree.diff_summary)
        if condensed is not None:
            parts.append(condensed)
    elif worktree.has_changes:
        parts.append("uncommitted changes")
    return " | ".join(parts)


def build_worktree_view(
    snapshot: WorktreeSnapshot,
    visibility: VisibilityStore,
    tool_installed: bool = True,
) -> ViewModel:
    """Build the worktree view.

    Args:
        snapshot: Current worktree snapshot
        visibility: Hidden set and show-hidden flag for worktrees
        tool_installed: False replaces the whole view with an install hint

    Returns:
        Header first, then visible worktrees in snapshot order. has_content is
        True when any non-main worktree is shown.
    """
    if not tool_installed:
        return ViewModel(nodes=(InstallNode(WORKTREE_TOOL_HINT),), has_content=False)

    hidden = visibility.hidden(Namespace.WORKTREES)
    show_hidden = visibility.showing_hidden(Namespace.WORKTREES)

    nodes: list[ViewNode] = [
        HeaderNode(title=WORKTREE_TOOL_HINT.display_name, version=snapshot.tool_version)
    ]
    for worktree in snapshot.worktrees:
        is_hidden = worktree.short_branch in hidden
        if is_hidden and not show_hidden:
            continue
        nodes.append(WorktreeNode(worktree=worktree, hidden=is_hidden))

    has_content = any(
        isinstance(node, WorktreeNode) and not node.worktree.is_main for node in nodes
    )
    return ViewModel(nodes=tuple(nodes), has_content=has_content)


def _process_nodes(
    snapshot: PipelineSnapshot,
    processes: tuple[ManagedProcess, ...],
    hidden: frozenset[str],
    show_hidden: bool,
) -> list[ProcessNode]:
    nodes: list[ProcessNode] = []
    for process in processes:
        is_hidden = process.name in hidden
        if is_hidden and not show_hidden:
            continue
        nodes.append(
            ProcessNode(
                process=process,
                declared=find_declared(snapshot.config, process.name),
                hidden=is_hidden,
            )
        )
    return nodes


def build_pipeline_view(
    snapshot: PipelineSnapshot,
    visibility: VisibilityStore,
    tool_installed: bool = True,
) -> ViewModel:
    """Build the pipeline view.

    Args:
        snapshot: Current reconciled pipeline snapshot
        visibility: Hidden set and show-hidden flag for processes
        tool_installed: False replaces the whole view with an install hint

    Returns:
        Header, daemon, declared stages (children filtered), then visible
        top-level processes. has_content is True when the configuration
        declares any stage or process.
    """
    if not tool_installed:
        return ViewModel(nodes=(InstallNode(PIPELINE_TOOL_HINT),), has_content=False)

    hidden = visibility.hidden(Namespace.PROCESSES)
    show_hidden = visibility.showing_hidden(Namespace.PROCESSES)

    nodes: list[ViewNode] = [
        HeaderNode(title=PIPELINE_TOOL_HINT.display_name, version=snapshot.tool_version),
        DaemonNode(daemon=snapshot.daemon),
    ]
    for stage in snapshot.stages:
        nodes.append(
            StageNode(
                name=stage.name,
                children=tuple(_process_nodes(snapshot, stage.processes, hidden, show_hidden)),
                running_count=sum(1 for p in stage.processes if p.status == "running"),
                total_count=len(stage.processes),
            )
        )
    nodes.extend(_process_nodes(snapshot, snapshot.processes, hidden, show_hidden))

    return ViewModel(nodes=tuple(nodes), has_content=not snapshot.config.is_empty)
