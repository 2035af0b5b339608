"""External command execution interface.

This module provides the seam between workview and the external binaries it
polls (git, the worktree tool, the pipeline daemon CLI).

Architecture:
- CommandRunner: Abstract base class defining the interface
- RealCommandRunner: Production implementation using asyncio subprocesses
- FakeCommandRunner (tests/fakes): In-memory implementation with canned results
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from workview.core.errors import ToolFailureError

DEFAULT_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one external command."""

    command: str
    args: tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def check(self, operation_context: str) -> "CommandResult":
        """Return self, or raise ToolFailureError if the command exited non-zero.

        Args:
            operation_context: Human-readable description used in the error message

        Returns:
            This result, unchanged

        Raises:
            ToolFailureError: If exit_code is non-zero
        """
        if self.exit_code != 0:
            raise ToolFailureError(
                self.command,
                self.args,
                self.exit_code,
                self.stderr,
                operation_context,
            )
        return self


class CommandRunner(ABC):
    """Abstract interface for running external commands.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    async def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> CommandResult:
        """Run a command to completion and capture its output.

        A non-zero exit code is NOT an error at this layer; callers inspect
        ``CommandResult.exit_code`` or call ``CommandResult.check()``.

        Args:
            command: Binary name or path
            args: Arguments passed verbatim (no shell)
            cwd: Working directory for the child process
            timeout_seconds: Hard deadline; the child is terminated when exceeded

        Returns:
            CommandResult with stdout, stderr, and exit code

        Raises:
            ToolMissingError: If the binary cannot be spawned
            ToolTimeoutError: If the deadline is exceeded
        """
        ...
