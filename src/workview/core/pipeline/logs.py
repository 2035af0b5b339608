"""Read-only log retrieval from the pipeline daemon CLI."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from workview.core.exec.abc import CommandRunner

DAEMON_TARGET = "--daemon"
DEFAULT_LOG_LINES = 200

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


@dataclass(frozen=True)
class LineCount:
    """Tail the last ``count`` lines, or everything when count is "all"."""

    count: int | Literal["all"]


@dataclass(frozen=True)
class Since:
    """Everything logged within ``duration`` (passed to the tool verbatim, e.g. "5m")."""

    duration: str


LogOption = LineCount | Since


def build_log_args(target: str, option: LogOption) -> list[str]:
    """Build arguments for ``<tool> logs``.

    Args:
        target: Process name, or DAEMON_TARGET for the daemon's own log
        option: How much of the log to request

    Returns:
        Argument list starting with "logs"
    """
    args = ["logs"]
    if target == DAEMON_TARGET:
        args.append(DAEMON_TARGET)
    else:
        args.append(target)

    match option:
        case LineCount(count="all"):
            pass
        case LineCount(count=count):
            args.extend(["-n", str(count)])
        case Since(duration=duration):
            args.extend(["--since", duration])
    return args


def strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


async def fetch_logs(
    runner: CommandRunner,
    tool: str,
    cwd: Path,
    target: str,
    option: LogOption,
    *,
    timeout_seconds: float,
) -> str:
    """Fetch a log excerpt with color codes removed.

    Raises:
        ToolMissingError: If the tool is not installed
        ToolTimeoutError: If the tool does not answer in time
        ToolFailureError: If the tool exits non-zero
    """
    result = await runner.run(
        tool, build_log_args(target, option), cwd, timeout_seconds=timeout_seconds
    )
    result.check(f"read logs for {target}")
    return strip_ansi(result.stdout)
