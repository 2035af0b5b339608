"""Parsers for the pipeline daemon status and the pipeline configuration file.

Every parser here has a defined empty result for malformed input and never
raises to its caller.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from workview.core.json_fields import as_bool, as_dict, as_list, as_str
from workview.core.pipeline.types import (
    NOT_RUNNING_DAEMON,
    PROCESS_STATUSES,
    DaemonInfo,
    DaemonStatus,
    DeclaredProcess,
    DeclaredStage,
    ManagedProcess,
    PipelineConfig,
    ProcessKind,
    ProcessStatus,
    Stage,
)

logger = logging.getLogger(__name__)

EMPTY_DAEMON_STATUS = DaemonStatus(daemon=NOT_RUNNING_DAEMON)


def normalize_status(value: str) -> ProcessStatus:
    """Map a reported status onto the four known values.

    Matching is case-insensitive. Unknown values become "stopped".
    """
    lowered = value.strip().lower()
    for status in PROCESS_STATUSES:
        if lowered == status:
            return status
    return "stopped"


def _normalize_kind(value: Any) -> ProcessKind:
    if value == "task":
        return "task"
    return "service"


def _parse_observed_process(raw: Any, stage: str | None) -> ManagedProcess | None:
    fields = as_dict(raw)
    name = as_str(fields.get("name"))
    if not name:
        return None
    return ManagedProcess(
        name=name,
        status=normalize_status(as_str(fields.get("status"))),
        pid=as_str(fields.get("pid")),
        uptime=as_str(fields.get("uptime")),
        restarts=as_str(fields.get("restarts"), default="0"),
        kind=_normalize_kind(fields.get("type")),
        stage=stage,
    )


def _parse_observed_processes(raw: Any, stage: str | None) -> tuple[ManagedProcess, ...]:
    processes: list[ManagedProcess] = []
    for item in as_list(raw):
        process = _parse_observed_process(item, stage)
        if process is None:
            logger.debug("Skipping malformed process entry: %r", item)
            continue
        processes.append(process)
    return tuple(processes)


def parse_daemon_status(text: str) -> DaemonStatus:
    """Parse the daemon's ``status --json`` output.

    Args:
        text: Raw stdout of the status command

    Returns:
        Parsed status, or a not-running status with no stages or processes
        when the document is missing or malformed
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Daemon status is not valid JSON: %s", e)
        return EMPTY_DAEMON_STATUS

    if not isinstance(data, dict) or not isinstance(data.get("daemon"), dict):
        logger.debug("Daemon status has no 'daemon' object")
        return EMPTY_DAEMON_STATUS

    daemon_fields = as_dict(data["daemon"])
    daemon = DaemonInfo(
        running=as_bool(daemon_fields.get("running")),
        pid=as_str(daemon_fields.get("pid")),
        uptime=as_str(daemon_fields.get("uptime")),
        config_path=as_str(daemon_fields.get("config")),
    )

    stages: list[Stage] = []
    for raw_stage in as_list(data.get("stages")):
        stage_fields = as_dict(raw_stage)
        stage_name = as_str(stage_fields.get("name"))
        if not stage_name:
            logger.debug("Skipping stage without a name: %r", raw_stage)
            continue
        stages.append(
            Stage(
                name=stage_name,
                processes=_parse_observed_processes(stage_fields.get("processes"), stage_name),
            )
        )

    return DaemonStatus(
        daemon=daemon,
        stages=tuple(stages),
        processes=_parse_observed_processes(data.get("processes"), None),
    )


@dataclass(frozen=True)
class StageEntry:
    """A ``{"type": "stage", "name", "steps"}`` item of the configuration file."""

    name: str
    steps: tuple[dict[str, Any], ...]


@dataclass(frozen=True)
class ProcessEntry:
    """Any other named item of the configuration file."""

    fields: dict[str, Any]


ConfigEntry = StageEntry | ProcessEntry


def _classify_entry(raw: Any) -> ConfigEntry | None:
    if not isinstance(raw, dict):
        return None
    if not as_str(raw.get("name")):
        return None
    if raw.get("type") == "stage":
        steps = tuple(step for step in as_list(raw.get("steps")) if isinstance(step, dict))
        return StageEntry(name=raw["name"], steps=steps)
    return ProcessEntry(fields=raw)


def _declared_process(fields: dict[str, Any], stage: str | None) -> DeclaredProcess | None:
    name = as_str(fields.get("name"))
    if not name:
        return None
    trigger_on = tuple(item for item in as_list(fields.get("trigger_on")) if isinstance(item, str))
    return DeclaredProcess(
        name=name,
        kind=_normalize_kind(fields.get("type")),
        command=as_str(fields.get("command")),
        manual=as_bool(fields.get("manual")),
        trigger_on=trigger_on,
        stage=stage,
        input_enabled=as_bool(as_dict(fields.get("input")).get("enabled")),
    )


def parse_pipeline_config(text: str) -> PipelineConfig:
    """Parse the contents of a pipeline configuration file.

    The item list is read from the ``pipeline`` key, falling back to the older
    ``services`` key. Items with ``"type": "stage"`` become stages whose
    ``steps`` are declared processes; everything else is a top-level process.
    Items without a name are skipped.

    Returns:
        Parsed configuration, or an empty one when the text is not a
        configuration document
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Pipeline config is not valid JSON: %s", e)
        return PipelineConfig()

    if not isinstance(data, dict):
        logger.debug("Pipeline config is not a JSON object")
        return PipelineConfig()

    items = data.get("pipeline") or data.get("services")
    if not isinstance(items, list):
        logger.debug("Pipeline config has no 'pipeline' or 'services' array")
        return PipelineConfig()

    stages: list[DeclaredStage] = []
    processes: list[DeclaredProcess] = []
    for raw in items:
        entry = _classify_entry(raw)
        match entry:
            case StageEntry(name=name, steps=steps):
                declared = [_declared_process(step, name) for step in steps]
                stages.append(
                    DeclaredStage(
                        name=name,
                        processes=tuple(p for p in declared if p is not None),
                    )
                )
            case ProcessEntry(fields=fields):
                process = _declared_process(fields, None)
                if process is not None:
                    processes.append(process)
            case None:
                logger.debug("Skipping malformed pipeline item: %r", raw)

    return PipelineConfig(
        stages=tuple(stages),
        processes=tuple(processes),
        stage_names=frozenset(stage.name for stage in stages),
    )


def load_pipeline_config(path: Path) -> PipelineConfig:
    """Read and parse a pipeline configuration file.

    A missing or unreadable file yields an empty configuration.
    """
    if not path.exists():
        logger.debug("No pipeline config at %s", path)
        return PipelineConfig()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Could not read pipeline config %s: %s", path, e)
        return PipelineConfig()
    return parse_pipeline_config(text)
