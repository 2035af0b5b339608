"""Tests for JSON output helpers and response schemas."""

import json
from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import ValidationError

from tests.conftest import load_fixture
from workview.cli.json_output import _serialize_for_json, emit_json
from workview.cli.json_schemas import (
    ProcessInfo,
    pipeline_status_response,
    worktree_list_response,
)
from workview.core.pipeline.parsing import parse_daemon_status, parse_pipeline_config
from workview.core.pipeline.reconcile import reconcile
from workview.core.state_store import InMemoryStateStore
from workview.core.view import build_pipeline_view, build_worktree_view
from workview.core.visibility import Namespace, VisibilityStore
from workview.core.worktrees.types import WorkingTree, WorktreeSnapshot


@dataclass(frozen=True)
class _Sample:
    path: Path
    names: frozenset[str]


def test_serialize_for_json_handles_special_types() -> None:
    """Test conversion of paths, tuples, frozensets, and dataclasses."""
    data = {"sample": _Sample(path=Path("/a"), names=frozenset({"b", "a"})), "t": (1, 2)}

    assert _serialize_for_json(data) == {
        "sample": {"path": "/a", "names": ["a", "b"]},
        "t": [1, 2],
    }


def test_emit_json_writes_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that JSON goes to stdout and nothing to stderr."""
    emit_json({"path": Path("/x"), "ok": True})

    captured = capsys.readouterr()
    assert json.loads(captured.out) == {"path": "/x", "ok": True}
    assert captured.err == ""


def test_worktree_list_response_marks_hidden() -> None:
    """Test that shown hidden worktrees are flagged in the response."""
    visibility = VisibilityStore(InMemoryStateStore())
    visibility.hide(Namespace.WORKTREES, "feature")
    visibility.toggle_show_hidden(Namespace.WORKTREES)
    snapshot = WorktreeSnapshot(
        tool_version="1.0",
        worktrees=(
            WorkingTree(
                path=Path("/repo/feature"),
                branch="refs/heads/feature",
                short_branch="feature",
                head="abc",
            ),
        ),
    )

    response = worktree_list_response(
        build_worktree_view(snapshot, visibility), tool_installed=True
    )

    assert response.tool_version == "1.0"
    assert response.worktrees[0].hidden is True
    assert response.worktrees[0].agent_running is None


def test_pipeline_status_response_counts() -> None:
    """Test that stage counts and declarations are carried into the response."""
    config = parse_pipeline_config(load_fixture("clier/clier-pipeline.json"))
    status = parse_daemon_status(load_fixture("clier/status_running.json"))
    view = build_pipeline_view(reconcile(config, status), VisibilityStore(InMemoryStateStore()))

    response = pipeline_status_response(view, tool_installed=True)

    assert response.daemon is not None
    assert response.daemon.pid == "900"
    assert response.stages[0].running == 1
    assert response.stages[0].total == 2
    worker = response.processes[-1]
    assert worker.name == "worker"
    assert worker.status == "stopped"
    assert worker.command == "node worker.js"


def test_process_info_rejects_unknown_status() -> None:
    """Test that the schema only admits the four known statuses."""
    with pytest.raises(ValidationError):
        ProcessInfo(
            name="x",
            status="exploded",
            pid="",
            uptime="",
            restarts="0",
            kind="service",
            stage=None,
            hidden=False,
            declared=False,
            command=None,
            manual=None,
            trigger_on=None,
            input_enabled=None,
        )
