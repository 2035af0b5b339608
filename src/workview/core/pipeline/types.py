"""Data models for the pipeline daemon, its processes, and their declarations."""

from dataclasses import dataclass, field
from typing import Literal

ProcessStatus = Literal["running", "stopped", "crashed", "restarting"]
ProcessKind = Literal["service", "task"]

PROCESS_STATUSES: tuple[ProcessStatus, ...] = ("running", "stopped", "crashed", "restarting")


@dataclass(frozen=True)
class ManagedProcess:
    """A supervised process as shown in the merged view.

    pid, uptime and restarts are opaque display strings. Processes that are
    declared but not observed are synthesized with status "stopped", empty
    pid and uptime, and restarts "0".
    """

    name: str
    status: ProcessStatus
    pid: str = ""
    uptime: str = ""
    restarts: str = "0"
    kind: ProcessKind = "service"
    stage: str | None = None


@dataclass(frozen=True)
class Stage:
    name: str
    processes: tuple[ManagedProcess, ...]


@dataclass(frozen=True)
class DaemonInfo:
    running: bool
    pid: str = ""
    uptime: str = ""
    config_path: str = ""


NOT_RUNNING_DAEMON = DaemonInfo(running=False)


@dataclass(frozen=True)
class DaemonStatus:
    """Parsed ``status --json`` document of the pipeline daemon."""

    daemon: DaemonInfo
    stages: tuple[Stage, ...] = ()
    processes: tuple[ManagedProcess, ...] = ()


@dataclass(frozen=True)
class DeclaredProcess:
    """A process entry from the pipeline configuration file.

    Attributes:
        name: Process name, unique within its scope
        kind: "service" (long-running) or "task" (runs to completion)
        command: Shell command the daemon runs
        manual: True when the process only starts on explicit request
        trigger_on: Names of processes whose completion triggers this one
        stage: Owning stage name, or None for top-level processes
        input_enabled: True when the process accepts stdin from the daemon
    """

    name: str
    kind: ProcessKind = "service"
    command: str = ""
    manual: bool = False
    trigger_on: tuple[str, ...] = ()
    stage: str | None = None
    input_enabled: bool = False


@dataclass(frozen=True)
class DeclaredStage:
    name: str
    processes: tuple[DeclaredProcess, ...] = ()


@dataclass(frozen=True)
class PipelineConfig:
    """Declared stages and top-level processes, in file order."""

    stages: tuple[DeclaredStage, ...] = ()
    processes: tuple[DeclaredProcess, ...] = ()
    stage_names: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.stages and not self.processes


@dataclass(frozen=True)
class PipelineSnapshot:
    """Merged pipeline state for one poll cycle.

    Attributes:
        tool_version: Output of ``<tool> --version`` or "" if unavailable
        daemon: Daemon liveness as reported, or not-running on failure
        stages: Declared stages with their merged processes
        processes: Merged top-level processes
        config: The configuration this snapshot was reconciled against
    """

    tool_version: str
    daemon: DaemonInfo
    stages: tuple[Stage, ...]
    processes: tuple[ManagedProcess, ...]
    config: PipelineConfig
