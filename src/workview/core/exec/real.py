"""Production CommandRunner using asyncio subprocesses."""

import asyncio
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from workview.core.errors import ToolMissingError, ToolTimeoutError
from workview.core.exec.abc import DEFAULT_TIMEOUT_SECONDS, CommandResult, CommandRunner

logger = logging.getLogger(__name__)

# Locations commonly missing from the PATH of a non-login parent process.
DEFAULT_EXTRA_PATH_DIRS: tuple[str, ...] = (
    "~/.local/bin",
    "~/bin",
    "/usr/local/bin",
    "/opt/homebrew/bin",
    "/opt/homebrew/sbin",
)


def build_child_env(
    base_env: dict[str, str], extra_path_dirs: Sequence[str]
) -> dict[str, str]:
    """Copy base_env and prepend any extra_path_dirs not already on PATH.

    Args:
        base_env: Environment to copy (normally os.environ)
        extra_path_dirs: Directories to make available; "~" is expanded

    Returns:
        New environment mapping for the child process
    """
    env = dict(base_env)
    current = env.get("PATH", "")
    current_parts = current.split(os.pathsep) if current else []
    missing = [
        expanded
        for expanded in (os.path.expanduser(d) for d in extra_path_dirs)
        if expanded not in current_parts
    ]
    if missing:
        env["PATH"] = os.pathsep.join([*missing, *current_parts])
    return env


class RealCommandRunner(CommandRunner):
    """Production implementation using asyncio.create_subprocess_exec.

    The child is killed when the deadline passes; there is no other
    cancellation of an in-flight call.
    """

    def __init__(self, extra_path_dirs: Sequence[str] = DEFAULT_EXTRA_PATH_DIRS) -> None:
        self._extra_path_dirs = tuple(extra_path_dirs)

    async def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> CommandResult:
        """Run the command and capture stdout/stderr as text."""
        arg_list = list(args)
        env = build_child_env(dict(os.environ), self._extra_path_dirs)
        logger.debug("Running %s %s in %s", command, " ".join(arg_list), cwd)

        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *arg_list,
                cwd=cwd,
                env=env,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ToolMissingError(command, arg_list) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=timeout_seconds
            )
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise ToolTimeoutError(command, arg_list, timeout_seconds) from e

        exit_code = process.returncode if process.returncode is not None else 1
        logger.debug("%s exited with %d", command, exit_code)
        return CommandResult(
            command=command,
            args=tuple(arg_list),
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
            exit_code=exit_code,
        )
