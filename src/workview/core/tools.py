"""Detection of the external tools workview polls."""

import logging
from dataclasses import dataclass
from pathlib import Path

from workview.core.errors import ToolError
from workview.core.exec.abc import CommandRunner
from workview.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)

INSTALL_CHECK_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True)
class InstallHint:
    """How to install a missing tool, shown in place of its view."""

    display_name: str
    install_command: str


WORKTREE_TOOL_HINT = InstallHint(
    display_name="GWT", install_command="npm install -g ai-git-worktrees"
)
PIPELINE_TOOL_HINT = InstallHint(display_name="Clier", install_command="npm install -g clier-ai")


async def is_command_installed(
    runner: CommandRunner,
    command: str,
    cwd: Path,
    *,
    timeout_seconds: float = INSTALL_CHECK_TIMEOUT_SECONDS,
) -> bool:
    """Check whether ``<command> --version`` runs and exits 0."""
    try:
        result = await runner.run(command, ["--version"], cwd, timeout_seconds=timeout_seconds)
    except ToolError as e:
        logger.debug("Install check for %s failed: %s", command, e)
        return False
    return result.exit_code == 0


async def fetch_tool_version(
    runner: CommandRunner,
    command: str,
    cwd: Path,
    *,
    timeout_seconds: float = INSTALL_CHECK_TIMEOUT_SECONDS,
) -> str:
    """Return the trimmed output of ``<command> --version``, or "" on any failure."""
    try:
        result = await runner.run(command, ["--version"], cwd, timeout_seconds=timeout_seconds)
    except ToolError as e:
        logger.debug("Version lookup for %s failed: %s", command, e)
        return ""
    if not result.ok:
        return ""
    return result.stdout.strip()


class MissingToolNotice:
    """Warns about a missing tool once per present-to-missing transition.

    Repeated failures while the tool stays missing are silent. Once the tool
    is seen again, the next disappearance warns again.
    """

    def __init__(self, command: str, feedback: UserFeedback, view_name: str) -> None:
        self._command = command
        self._feedback = feedback
        self._view_name = view_name
        self._missing = False

    @property
    def missing(self) -> bool:
        return self._missing

    def report_missing(self) -> None:
        if self._missing:
            return
        self._missing = True
        self._feedback.warning(
            f"{self._command} binary not found on PATH. "
            f"Install {self._command} to use the {self._view_name} view."
        )

    def report_present(self) -> None:
        self._missing = False
