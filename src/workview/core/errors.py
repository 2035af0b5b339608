"""Errors raised at the boundary where external tools are invoked.

Only the command runner raises these. Providers catch ``ToolError`` and fall
back to a synthesized snapshot, so nothing here reaches the view layer.
"""

from collections.abc import Sequence


def _format_command(command: str, args: Sequence[str]) -> str:
    return " ".join([command, *args])


class ToolError(RuntimeError):
    """Base class for failures invoking an external tool."""

    def __init__(self, message: str, command: str, args: Sequence[str]) -> None:
        super().__init__(message)
        self.command = command
        self.args_list = list(args)

    @property
    def command_line(self) -> str:
        """Full command line for diagnostics."""
        return _format_command(self.command, self.args_list)


class ToolMissingError(ToolError):
    """The binary could not be spawned at all."""

    def __init__(self, command: str, args: Sequence[str]) -> None:
        message = f"Command not found: {command}"
        message += f"\nFull command: {_format_command(command, args)}"
        super().__init__(message, command, args)


class ToolTimeoutError(ToolError):
    """The tool exceeded its deadline and was terminated."""

    def __init__(self, command: str, args: Sequence[str], timeout_seconds: float) -> None:
        message = (
            f"Command timed out after {timeout_seconds:g}s: {_format_command(command, args)}"
        )
        super().__init__(message, command, args)
        self.timeout_seconds = timeout_seconds


class ToolFailureError(ToolError):
    """The tool ran but exited non-zero where success was required."""

    def __init__(
        self,
        command: str,
        args: Sequence[str],
        exit_code: int,
        stderr: str,
        operation_context: str,
    ) -> None:
        message = f"Failed to {operation_context}"
        message += f"\nCommand: {_format_command(command, args)}"
        message += f"\nExit code: {exit_code}"
        stderr_stripped = stderr.strip()
        if stderr_stripped:
            message += f"\nstderr: {stderr_stripped}"
        super().__init__(message, command, args)
        self.exit_code = exit_code
        self.stderr = stderr
