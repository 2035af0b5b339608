"""Tests for merging declared pipeline configuration with observed status."""

from dataclasses import replace

from tests.conftest import load_fixture
from workview.core.pipeline.parsing import parse_daemon_status, parse_pipeline_config
from workview.core.pipeline.reconcile import (
    find_declared,
    pipeline_fingerprint,
    reconcile,
    stopped_snapshot,
)
from workview.core.pipeline.types import (
    DaemonInfo,
    DaemonStatus,
    DeclaredProcess,
    DeclaredStage,
    ManagedProcess,
    PipelineConfig,
    Stage,
)


def _config() -> PipelineConfig:
    return parse_pipeline_config(load_fixture("clier/clier-pipeline.json"))


def test_reconcile_running_daemon() -> None:
    """Test merge order, kind override, and synthesized stopped processes."""
    # Arrange
    config = _config()
    status = parse_daemon_status(load_fixture("clier/status_running.json"))

    # Act
    snapshot = reconcile(config, status, tool_version="0.9.1")

    # Assert
    assert snapshot.tool_version == "0.9.1"
    assert snapshot.daemon.running
    assert [stage.name for stage in snapshot.stages] == ["build"]

    compile_proc, lint_proc = snapshot.stages[0].processes
    assert compile_proc.name == "compile"
    assert compile_proc.status == "running"
    assert compile_proc.kind == "task"
    assert compile_proc.pid == "901"
    assert lint_proc == ManagedProcess(
        name="lint", status="stopped", pid="", uptime="", restarts="0", kind="task", stage="build"
    )

    assert [p.name for p in snapshot.processes] == ["api", "adhoc", "worker"]
    assert snapshot.processes[0].status == "crashed"
    assert snapshot.processes[0].restarts == "3"
    assert snapshot.processes[2].status == "stopped"
    assert snapshot.config == config


def test_reconcile_drops_undeclared_observed_stage() -> None:
    """Test that observed stages with no declaration are not shown anywhere."""
    snapshot = reconcile(_config(), parse_daemon_status(load_fixture("clier/status_running.json")))

    names = {p.name for stage in snapshot.stages for p in stage.processes}
    names.update(p.name for p in snapshot.processes)
    assert "phantom" not in names
    assert "ghost-stage" not in {stage.name for stage in snapshot.stages}


def test_reconcile_stopped_daemon_ignores_observed() -> None:
    """Test that a stopped daemon reports every declared entity stopped."""
    config = _config()
    status = parse_daemon_status(load_fixture("clier/status_stopped.json"))

    snapshot = reconcile(config, status)

    assert not snapshot.daemon.running
    all_processes = [p for stage in snapshot.stages for p in stage.processes]
    all_processes.extend(snapshot.processes)
    assert [p.name for p in all_processes] == ["compile", "lint", "api", "worker"]
    for process in all_processes:
        assert process.status == "stopped"
        assert process.pid == ""
        assert process.uptime == ""
        assert process.restarts == "0"


def test_reconcile_declared_stage_without_observation() -> None:
    """Test that a declared stage missing from status has only stopped processes."""
    status = DaemonStatus(daemon=DaemonInfo(running=True, pid="1"))

    snapshot = reconcile(_config(), status)

    assert [p.status for p in snapshot.stages[0].processes] == ["stopped", "stopped"]
    assert [p.name for p in snapshot.processes] == ["api", "worker"]


def test_reconcile_name_in_both_scopes() -> None:
    """Test that a name observed in a stage is not synthesized again at top level."""
    config = PipelineConfig(
        stages=(DeclaredStage(name="s", processes=(DeclaredProcess(name="dup", stage="s"),)),),
        processes=(DeclaredProcess(name="dup", kind="task"),),
        stage_names=frozenset({"s"}),
    )
    status = DaemonStatus(
        daemon=DaemonInfo(running=True),
        stages=(Stage(name="s", processes=(ManagedProcess(name="dup", status="running"),)),),
    )

    snapshot = reconcile(config, status)

    assert [p.name for p in snapshot.stages[0].processes] == ["dup"]
    assert snapshot.processes == ()
    assert find_declared(config, "dup") == config.stages[0].processes[0]


def test_find_declared_top_level_and_missing() -> None:
    """Test lookup of top-level processes and unknown names."""
    config = _config()

    found = find_declared(config, "worker")

    assert found is not None
    assert found.stage is None
    assert find_declared(config, "nope") is None


def test_stopped_snapshot_keeps_daemon_and_version() -> None:
    """Test the fallback snapshot used when status is unavailable."""
    snapshot = stopped_snapshot(_config(), tool_version="1.0")

    assert snapshot.tool_version == "1.0"
    assert not snapshot.daemon.running
    assert [stage.name for stage in snapshot.stages] == ["build"]
    assert stopped_snapshot(PipelineConfig()).stages == ()


def test_pipeline_fingerprint_stable_and_sensitive() -> None:
    """Test that identical inputs share a fingerprint and status changes alter it."""
    config = _config()
    status = parse_daemon_status(load_fixture("clier/status_running.json"))
    first = reconcile(config, status, tool_version="1.0")
    second = reconcile(config, status, tool_version="1.0")

    crashed_stage = replace(
        status.stages[0],
        processes=(replace(status.stages[0].processes[0], status="crashed"),),
    )
    changed = reconcile(
        config, replace(status, stages=(crashed_stage, *status.stages[1:])), tool_version="1.0"
    )
    new_uptime = reconcile(
        config, replace(status, daemon=replace(status.daemon, uptime="2h 4m")), tool_version="1.0"
    )

    assert pipeline_fingerprint(first) == pipeline_fingerprint(second)
    assert pipeline_fingerprint(first) != pipeline_fingerprint(changed)
    assert pipeline_fingerprint(first) != pipeline_fingerprint(new_uptime)


def test_pipeline_fingerprint_tracks_declared_metadata() -> None:
    """Test that editing a declared command or trigger alters the fingerprint."""
    config = _config()
    status = parse_daemon_status(load_fixture("clier/status_running.json"))
    worker = config.processes[-1]
    edited_command = replace(
        config, processes=(*config.processes[:-1], replace(worker, command="node worker2.js"))
    )
    edited_trigger = replace(
        config, processes=(*config.processes[:-1], replace(worker, trigger_on=("api",)))
    )

    base = pipeline_fingerprint(reconcile(config, status))

    assert base != pipeline_fingerprint(reconcile(edited_command, status))
    assert base != pipeline_fingerprint(reconcile(edited_trigger, status))
