"""Merge declared pipeline configuration with observed daemon status.

Everything here is a pure function over immutable inputs, so overlapping
fetches can reconcile concurrently without interfering.
"""

import logging
from dataclasses import replace

from workview.core.pipeline.types import (
    NOT_RUNNING_DAEMON,
    DaemonInfo,
    DaemonStatus,
    DeclaredProcess,
    ManagedProcess,
    PipelineConfig,
    PipelineSnapshot,
    Stage,
)

logger = logging.getLogger(__name__)


def find_declared(config: PipelineConfig, name: str) -> DeclaredProcess | None:
    """Look up a declared process by name.

    Stages are searched in order before top-level processes, so a name
    declared in both scopes resolves to the stage declaration.
    """
    for stage in config.stages:
        for process in stage.processes:
            if process.name == name:
                return process
    for process in config.processes:
        if process.name == name:
            return process
    return None


def _synthesize_stopped(declared: DeclaredProcess) -> ManagedProcess:
    return ManagedProcess(
        name=declared.name,
        status="stopped",
        pid="",
        uptime="",
        restarts="0",
        kind=declared.kind,
        stage=declared.stage,
    )


def _with_declared_kind(config: PipelineConfig, observed: ManagedProcess) -> ManagedProcess:
    declared = find_declared(config, observed.name)
    if declared is None:
        return observed
    return replace(observed, kind=declared.kind)


def stopped_snapshot(
    config: PipelineConfig,
    tool_version: str = "",
    daemon: DaemonInfo = NOT_RUNNING_DAEMON,
) -> PipelineSnapshot:
    """Build a snapshot where every declared entity is stopped.

    Used when the daemon reports it is not running and as the fallback when
    the status command cannot be run at all.
    """
    stages = tuple(
        Stage(
            name=declared_stage.name,
            processes=tuple(_synthesize_stopped(p) for p in declared_stage.processes),
        )
        for declared_stage in config.stages
    )
    processes = tuple(_synthesize_stopped(p) for p in config.processes)
    return PipelineSnapshot(
        tool_version=tool_version,
        daemon=daemon,
        stages=stages,
        processes=processes,
        config=config,
    )


def reconcile(
    config: PipelineConfig, status: DaemonStatus, tool_version: str = ""
) -> PipelineSnapshot:
    """Merge declared configuration with observed status into one snapshot.

    When the daemon is running, each declared stage lists the observed
    processes of the same-named observed stage followed by its declared but
    unobserved processes (stopped). Top level lists every observed top-level
    process, then every declared top-level process not observed anywhere.
    Observed kinds are overridden by the declared kind when one exists.

    When the daemon is not running, observed data is ignored and every
    declared entity is stopped.

    Args:
        config: Declared stages and processes
        status: Parsed daemon status
        tool_version: Version string carried through to the snapshot

    Returns:
        Merged snapshot; stage order is the declared order
    """
    if not status.daemon.running:
        return stopped_snapshot(config, tool_version=tool_version, daemon=status.daemon)

    observed_stages = {stage.name: stage for stage in status.stages}
    for stage in status.stages:
        if stage.name not in config.stage_names:
            logger.debug("Dropping observed stage with no declaration: %s", stage.name)

    stages: list[Stage] = []
    for declared_stage in config.stages:
        observed_stage = observed_stages.get(declared_stage.name)
        observed = observed_stage.processes if observed_stage is not None else ()
        observed_names = {p.name for p in observed}

        merged = [_with_declared_kind(config, p) for p in observed]
        merged.extend(
            _synthesize_stopped(p) for p in declared_stage.processes if p.name not in observed_names
        )
        stages.append(Stage(name=declared_stage.name, processes=tuple(merged)))

    all_observed_names = {p.name for p in status.processes}
    for stage in status.stages:
        all_observed_names.update(p.name for p in stage.processes)

    processes = [_with_declared_kind(config, p) for p in status.processes]
    processes.extend(
        _synthesize_stopped(p) for p in config.processes if p.name not in all_observed_names
    )

    return PipelineSnapshot(
        tool_version=tool_version,
        daemon=status.daemon,
        stages=tuple(stages),
        processes=tuple(processes),
        config=config,
    )


def _process_key(process: ManagedProcess) -> str:
    return "|".join(
        [
            process.name,
            process.status,
            process.pid,
            process.uptime,
            process.restarts,
            process.kind,
        ]
    )


def _declared_key(declared: DeclaredProcess) -> str:
    return "|".join(
        [
            "declared",
            declared.name,
            declared.stage or "",
            declared.kind,
            declared.command,
            str(declared.manual),
            ",".join(declared.trigger_on),
            str(declared.input_enabled),
        ]
    )


def pipeline_fingerprint(snapshot: PipelineSnapshot) -> str:
    """Build a string key from a snapshot so real changes can be detected.

    Uptime is included, so a running daemon changes fingerprint whenever the
    reported uptime string changes. Declared metadata is included as well, so
    an edited configuration file replaces the cached snapshot even when no
    process changed state.
    """
    daemon = snapshot.daemon
    parts = [
        f"header|{snapshot.tool_version}",
        f"daemon|{daemon.running}|{daemon.pid}|{daemon.uptime}|{daemon.config_path}",
    ]
    for stage in snapshot.stages:
        parts.append(f"stage|{stage.name}")
        parts.extend(_process_key(p) for p in stage.processes)
    parts.append("top")
    parts.extend(_process_key(p) for p in snapshot.processes)
    config = snapshot.config
    for declared_stage in config.stages:
        parts.extend(_declared_key(d) for d in declared_stage.processes)
    parts.extend(_declared_key(d) for d in config.processes)
    return "\n".join(parts)
