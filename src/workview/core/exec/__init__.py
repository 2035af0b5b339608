from workview.core.exec.abc import DEFAULT_TIMEOUT_SECONDS, CommandResult, CommandRunner
from workview.core.exec.real import RealCommandRunner

__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "CommandResult",
    "CommandRunner",
    "RealCommandRunner",
]
