"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from workview.core.config import ConfigStore, FilesystemConfigStore, GlobalConfig
from workview.core.exec.abc import CommandRunner
from workview.core.exec.real import RealCommandRunner
from workview.core.pipeline.provider import PipelineProvider
from workview.core.state_store import JsonStateStore, StateStore, state_path_for
from workview.core.time.abc import Time
from workview.core.time.real import RealTime
from workview.core.tools import is_command_installed
from workview.core.user_feedback import InteractiveFeedback, SuppressedFeedback, UserFeedback
from workview.core.visibility import VisibilityStore
from workview.core.worktrees.provider import WorktreeProvider


@dataclass(frozen=True)
class WorkviewContext:
    """Immutable context holding all dependencies for workview operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    runner: CommandRunner
    time: Time
    feedback: UserFeedback
    config_store: ConfigStore
    global_config: GlobalConfig
    state_store: StateStore
    visibility: VisibilityStore
    workspace: Path

    def worktree_provider(self) -> WorktreeProvider:
        """Create a worktree provider for this workspace from global config."""
        config = self.global_config
        return WorktreeProvider(
            runner=self.runner,
            time=self.time,
            feedback=self.feedback,
            workspace=self.workspace,
            tool=config.worktree_tool,
            debounce_seconds=config.debounce_seconds,
            poll_interval_seconds=config.poll_interval_seconds,
            command_timeout_seconds=config.command_timeout_seconds,
            install_check_timeout_seconds=config.install_check_timeout_seconds,
        )

    def pipeline_provider(self) -> PipelineProvider:
        """Create a pipeline provider for this workspace from global config."""
        config = self.global_config
        return PipelineProvider(
            runner=self.runner,
            time=self.time,
            feedback=self.feedback,
            workspace=self.workspace,
            tool=config.pipeline_tool,
            config_file=config.pipeline_config_file,
            poll_interval_seconds=config.poll_interval_seconds,
            command_timeout_seconds=config.command_timeout_seconds,
            install_check_timeout_seconds=config.install_check_timeout_seconds,
        )

    async def is_installed(self, tool: str) -> bool:
        return await is_command_installed(
            self.runner,
            tool,
            self.workspace,
            timeout_seconds=self.global_config.install_check_timeout_seconds,
        )

    @staticmethod
    def for_test(
        runner: CommandRunner | None = None,
        time: Time | None = None,
        feedback: UserFeedback | None = None,
        config_store: ConfigStore | None = None,
        global_config: GlobalConfig | None = None,
        state_store: StateStore | None = None,
        workspace: Path | None = None,
    ) -> "WorkviewContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            runner: Optional CommandRunner. If None, creates FakeCommandRunner
                with no canned results (every command is "not found").
            time: Optional Time. If None, creates FakeTime.
            feedback: Optional UserFeedback. If None, creates FakeUserFeedback.
            config_store: Optional ConfigStore. If None, creates
                InMemoryConfigStore holding global_config.
            global_config: Optional GlobalConfig. If None, uses defaults.
            state_store: Optional StateStore. If None, creates empty InMemoryStateStore.
            workspace: Optional workspace root. If None, uses Path("/test/workspace").

        Returns:
            WorkviewContext configured with provided values and test defaults

        Example:
            >>> runner = FakeCommandRunner(results={("gwt", "--version"): ok("1.2.0")})
            >>> ctx = WorkviewContext.for_test(runner=runner, workspace=tmp_path)
        """
        from tests.fakes.command_runner import FakeCommandRunner
        from tests.fakes.time import FakeTime
        from tests.fakes.user_feedback import FakeUserFeedback

        from workview.core.config import InMemoryConfigStore
        from workview.core.state_store import InMemoryStateStore

        if runner is None:
            runner = FakeCommandRunner()

        if time is None:
            time = FakeTime()

        if feedback is None:
            feedback = FakeUserFeedback()

        if global_config is None:
            global_config = GlobalConfig()

        if config_store is None:
            config_store = InMemoryConfigStore(config=global_config)

        if state_store is None:
            state_store = InMemoryStateStore()

        if workspace is None:
            workspace = Path("/test/workspace")

        return WorkviewContext(
            runner=runner,
            time=time,
            feedback=feedback,
            config_store=config_store,
            global_config=global_config,
            state_store=state_store,
            visibility=VisibilityStore(state_store),
            workspace=workspace,
        )


def create_context(*, workspace: Path, quiet: bool) -> WorkviewContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        workspace: Root directory whose worktrees and pipeline are shown
        quiet: If True, informational and success feedback is suppressed

    Returns:
        WorkviewContext with real implementations

    Raises:
        ValueError: If the global config file exists but is malformed
    """
    # 1. Load global config (defaults when the file does not exist)
    config_store = FilesystemConfigStore()
    global_config = config_store.load_or_default()

    # 2. Per-workspace state
    state_store = JsonStateStore(state_path_for(workspace))

    feedback: UserFeedback = SuppressedFeedback() if quiet else InteractiveFeedback()

    return WorkviewContext(
        runner=RealCommandRunner(extra_path_dirs=global_config.extra_path_dirs),
        time=RealTime(),
        feedback=feedback,
        config_store=config_store,
        global_config=global_config,
        state_store=state_store,
        visibility=VisibilityStore(state_store),
        workspace=workspace,
    )
