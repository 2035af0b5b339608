"""Pydantic models for JSON output schemas.

These models define the validated JSON shape of ``--json`` output. They are
built from view models, so hidden entities only appear when show-hidden is on.
"""

from pydantic import BaseModel, ConfigDict, Field

from workview.core.view import (
    DaemonNode,
    HeaderNode,
    ProcessNode,
    StageNode,
    ViewModel,
    WorktreeNode,
)


class WorktreeInfo(BaseModel):
    """One worktree in `workview wt list --json`.

    Enrichment fields are null when the status source was unavailable.
    """

    model_config = ConfigDict(strict=True)

    path: str
    branch: str
    short_branch: str
    head: str
    is_main: bool
    is_gwt: bool
    is_bare: bool
    is_detached: bool
    agent_running: bool | None
    agent_pid: int | None
    has_changes: bool | None
    diff_summary: str | None
    hidden: bool


class WorktreeListResponse(BaseModel):
    """JSON response schema for `workview wt list`.

    Attributes:
        tool_installed: False when the worktree tool is missing
        tool_version: Reported tool version ("" if unknown)
        has_content: True when any non-main worktree is listed
        worktrees: Visible worktrees, main first
    """

    model_config = ConfigDict(strict=True)

    tool_installed: bool
    tool_version: str
    has_content: bool
    worktrees: list[WorktreeInfo]


class ProcessInfo(BaseModel):
    """One process in `workview pipeline status --json`."""

    model_config = ConfigDict(strict=True)

    name: str
    status: str = Field(..., pattern="^(running|stopped|crashed|restarting)$")
    pid: str
    uptime: str
    restarts: str
    kind: str = Field(..., pattern="^(service|task)$")
    stage: str | None
    hidden: bool
    declared: bool
    command: str | None
    manual: bool | None
    trigger_on: list[str] | None
    input_enabled: bool | None


class StageInfo(BaseModel):
    model_config = ConfigDict(strict=True)

    name: str
    running: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    processes: list[ProcessInfo]


class DaemonInfoResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    running: bool
    pid: str
    uptime: str
    config_path: str


class PipelineStatusResponse(BaseModel):
    """JSON response schema for `workview pipeline status`."""

    model_config = ConfigDict(strict=True)

    tool_installed: bool
    tool_version: str
    has_content: bool
    daemon: DaemonInfoResponse | None
    stages: list[StageInfo]
    processes: list[ProcessInfo]


def worktree_list_response(view: ViewModel, tool_installed: bool) -> WorktreeListResponse:
    tool_version = ""
    worktrees: list[WorktreeInfo] = []
    for node in view.nodes:
        if isinstance(node, HeaderNode):
            tool_version = node.version
        elif isinstance(node, WorktreeNode):
            wt = node.worktree
            worktrees.append(
                WorktreeInfo(
                    path=str(wt.path),
                    branch=wt.branch,
                    short_branch=wt.short_branch,
                    head=wt.head,
                    is_main=wt.is_main,
                    is_gwt=wt.is_gwt,
                    is_bare=wt.is_bare,
                    is_detached=wt.is_detached,
                    agent_running=wt.agent_running,
                    agent_pid=wt.agent_pid,
                    has_changes=wt.has_changes,
                    diff_summary=wt.diff_summary,
                    hidden=node.hidden,
                )
            )
    return WorktreeListResponse(
        tool_installed=tool_installed,
        tool_version=tool_version,
        has_content=view.has_content,
        worktrees=worktrees,
    )


def _process_info(node: ProcessNode) -> ProcessInfo:
    process = node.process
    declared = node.declared
    return ProcessInfo(
        name=process.name,
        status=process.status,
        pid=process.pid,
        uptime=process.uptime,
        restarts=process.restarts,
        kind=process.kind,
        stage=process.stage,
        hidden=node.hidden,
        declared=declared is not None,
        command=declared.command if declared is not None else None,
        manual=declared.manual if declared is not None else None,
        trigger_on=list(declared.trigger_on) if declared is not None else None,
        input_enabled=declared.input_enabled if declared is not None else None,
    )


def pipeline_status_response(view: ViewModel, tool_installed: bool) -> PipelineStatusResponse:
    tool_version = ""
    daemon: DaemonInfoResponse | None = None
    stages: list[StageInfo] = []
    processes: list[ProcessInfo] = []
    for node in view.nodes:
        if isinstance(node, HeaderNode):
            tool_version = node.version
        elif isinstance(node, DaemonNode):
            daemon = DaemonInfoResponse(
                running=node.daemon.running,
                pid=node.daemon.pid,
                uptime=node.daemon.uptime,
                config_path=node.daemon.config_path,
            )
        elif isinstance(node, StageNode):
            stages.append(
                StageInfo(
                    name=node.name,
                    running=node.running_count,
                    total=node.total_count,
                    processes=[_process_info(child) for child in node.children],
                )
            )
        elif isinstance(node, ProcessNode):
            processes.append(_process_info(node))
    return PipelineStatusResponse(
        tool_installed=tool_installed,
        tool_version=tool_version,
        has_content=view.has_content,
        daemon=daemon,
        stages=stages,
        processes=processes,
    )
