"""Tests for building view models from snapshots."""

from pathlib import Path

import pytest

from tests.conftest import load_fixture
from workview.core.pipeline.parsing import parse_daemon_status, parse_pipeline_config
from workview.core.pipeline.reconcile import reconcile, stopped_snapshot
from workview.core.pipeline.types import (
    DaemonInfo,
    ManagedProcess,
    PipelineConfig,
    PipelineSnapshot,
)
from workview.core.state_store import InMemoryStateStore
from workview.core.tools import PIPELINE_TOOL_HINT, WORKTREE_TOOL_HINT
from workview.core.view import (
    DaemonNode,
    HeaderNode,
    InstallNode,
    ProcessNode,
    StageNode,
    WorktreeNode,
    build_pipeline_view,
    build_worktree_view,
    describe_process,
    describe_worktree,
    summarize_diff,
)
from workview.core.visibility import Namespace, VisibilityStore
from workview.core.worktrees.types import WorkingTree, WorktreeSnapshot


def _worktree(
    branch: str,
    is_main: bool = False,
    agent_running: bool | None = None,
    has_changes: bool | None = None,
    diff_summary: str | None = None,
) -> WorkingTree:
    return WorkingTree(
        path=Path("/repo") / branch,
        branch=f"refs/heads/{branch}",
        short_branch=branch,
        head="0123456789abcdef",
        is_main=is_main,
        agent_running=agent_running,
        has_changes=has_changes,
        diff_summary=diff_summary,
    )


def _snapshot() -> WorktreeSnapshot:
    return WorktreeSnapshot(
        tool_version="1.4.0",
        worktrees=(
            _worktree("main", is_main=True),
            _worktree("feature-a"),
            _worktree("feature-b"),
        ),
    )


def _visibility() -> VisibilityStore:
    return VisibilityStore(InMemoryStateStore())


def _pipeline_snapshot() -> PipelineSnapshot:
    config = parse_pipeline_config(load_fixture("clier/clier-pipeline.json"))
    status = parse_daemon_status(load_fixture("clier/status_running.json"))
    return reconcile(config, status, tool_version="0.9.1")


def test_worktree_view_lists_header_then_worktrees() -> None:
    """Test node order and labels of the worktree view."""
    view = build_worktree_view(_snapshot(), _visibility())

    header = view.nodes[0]
    assert isinstance(header, HeaderNode)
    assert header.title == "GWT"
    assert header.description == "1.4.0"
    labels = [node.label for node in view.nodes[1:] if isinstance(node, WorktreeNode)]
    assert labels == ["main (main)", "feature-a", "feature-b"]
    assert view.has_content


@pytest.mark.parametrize("show_hidden", [False, True])
def test_worktree_view_hidden_filtering(show_hidden: bool) -> None:
    """Test that hidden worktrees appear only when show-hidden is on, marked as hidden."""
    # Arrange
    visibility = _visibility()
    visibility.hide(Namespace.WORKTREES, "feature-a")
    if show_hidden:
        visibility.toggle_show_hidden(Namespace.WORKTREES)

    # Act
    view = build_worktree_view(_snapshot(), visibility)

    # Assert
    nodes = [node for node in view.nodes if isinstance(node, WorktreeNode)]
    names = [node.worktree.short_branch for node in nodes]
    if show_hidden:
        assert names == ["main", "feature-a", "feature-b"]
        hidden_node = nodes[1]
        assert hidden_node.hidden
        assert hidden_node.description.startswith("(hidden) ")
    else:
        assert names == ["main", "feature-b"]
        assert not any(node.hidden for node in nodes)


def test_worktree_view_has_no_content_when_only_main_visible() -> None:
    """Test that hiding every linked worktree leaves the view without content."""
    visibility = _visibility()
    visibility.hide(Namespace.WORKTREES, "feature-a")
    visibility.hide(Namespace.WORKTREES, "feature-b")

    view = build_worktree_view(_snapshot(), visibility)

    assert not view.has_content
    assert len(view.nodes) == 2


def test_worktree_view_not_installed() -> None:
    """Test that a missing tool replaces the view with an install hint."""
    view = build_worktree_view(_snapshot(), _visibility(), tool_installed=False)

    assert view.nodes == (InstallNode(WORKTREE_TOOL_HINT),)
    assert not view.has_content
    install = view.nodes[0]
    assert isinstance(install, InstallNode)
    assert install.label == "Install GWT"


def test_header_without_version_reads_not_found() -> None:
    """Test that an unknown version is shown as not found."""
    view = build_worktree_view(WorktreeSnapshot(tool_version="", worktrees=()), _visibility())

    header = view.nodes[0]
    assert isinstance(header, HeaderNode)
    assert header.description == "not found"
    assert not view.has_content


def test_describe_worktree() -> None:
    """Test the worktree description parts."""
    plain = _worktree("a")
    busy = _worktree(
        "b",
        agent_running=True,
        diff_summary="3 files changed, 10 insertions(+), 2 deletions(-)",
    )
    dirty = _worktree("c", has_changes=True)

    assert describe_worktree(plain) == "0123456"
    assert describe_worktree(busy) == "0123456 | agent running | 3 files +10 -2"
    assert describe_worktree(dirty) == "0123456 | uncommitted changes"


def test_summarize_diff() -> None:
    """Test condensing of git shortstat lines."""
    assert summarize_diff("1 file changed, 4 insertions(+)") == "1 files +4"
    assert summarize_diff("2 files changed, 7 deletions(-)") == "2 files -7"
    assert summarize_diff("nothing useful") is None


def test_pipeline_view_structure() -> None:
    """Test header, daemon, stages with counts, then top-level processes."""
    # Act
    view = build_pipeline_view(_pipeline_snapshot(), _visibility())

    # Assert
    header, daemon, stage, *processes = view.nodes
    assert isinstance(header, HeaderNode)
    assert header.title == "Clier"
    assert isinstance(daemon, DaemonNode)
    assert daemon.description == "running | PID 900 | 2h 3m"
    assert isinstance(stage, StageNode)
    assert stage.name == "build"
    assert stage.description == "1/2 running"
    assert [child.process.name for child in stage.children] == ["compile", "lint"]
    assert [node.process.name for node in processes if isinstance(node, ProcessNode)] == [
        "api",
        "adhoc",
        "worker",
    ]
    assert view.has_content


def test_pipeline_view_links_declarations() -> None:
    """Test that process nodes carry their declaration when one exists."""
    view = build_pipeline_view(_pipeline_snapshot(), _visibility())

    nodes = {node.process.name: node for node in view.nodes if isinstance(node, ProcessNode)}
    api_decl = nodes["api"].declared
    assert api_decl is not None
    assert api_decl.trigger_on == ("compile",)
    assert nodes["adhoc"].declared is None


@pytest.mark.parametrize("show_hidden", [False, True])
def test_pipeline_view_hidden_filtering(show_hidden: bool) -> None:
    """Test that hidden processes are filtered but still counted in stage totals."""
    visibility = _visibility()
    visibility.hide(Namespace.PROCESSES, "compile")
    visibility.hide(Namespace.PROCESSES, "api")
    if show_hidden:
        visibility.toggle_show_hidden(Namespace.PROCESSES)

    view = build_pipeline_view(_pipeline_snapshot(), visibility)

    stage = next(node for node in view.nodes if isinstance(node, StageNode))
    top = [node for node in view.nodes if isinstance(node, ProcessNode)]
    assert stage.running_count == 1
    assert stage.total_count == 2
    if show_hidden:
        assert [child.process.name for child in stage.children] == ["compile", "lint"]
        assert stage.children[0].description.startswith("(hidden) running")
        assert [node.process.name for node in top] == ["api", "adhoc", "worker"]
    else:
        assert [child.process.name for child in stage.children] == ["lint"]
        assert [node.process.name for node in top] == ["adhoc", "worker"]


def test_pipeline_view_empty_config_has_no_content() -> None:
    """Test that a workspace without declarations has no content but keeps daemon row."""
    view = build_pipeline_view(stopped_snapshot(PipelineConfig()), _visibility())

    assert not view.has_content
    assert [type(node) for node in view.nodes] == [HeaderNode, DaemonNode]
    daemon = view.nodes[1]
    assert isinstance(daemon, DaemonNode)
    assert daemon.description == "stopped"


def test_pipeline_view_not_installed() -> None:
    """Test that a missing daemon CLI replaces the view with an install hint."""
    view = build_pipeline_view(_pipeline_snapshot(), _visibility(), tool_installed=False)

    assert view.nodes == (InstallNode(PIPELINE_TOOL_HINT),)
    assert not view.has_content


def test_describe_process() -> None:
    """Test process description parts."""
    running = ManagedProcess(
        name="api", status="running", pid="12", uptime="5m", restarts="2"
    )
    stopped = ManagedProcess(name="lint", status="stopped")

    assert describe_process(running) == "running | PID 12 | 5m | 2 restarts"
    assert describe_process(stopped) == "stopped"
    assert DaemonNode(DaemonInfo(running=False)).description == "stopped"
