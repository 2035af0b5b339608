"""Cached poller for the pipeline view."""

import logging
from pathlib import Path

from workview.core.cached_provider import CachedProvider
from workview.core.errors import ToolError, ToolMissingError
from workview.core.exec.abc import DEFAULT_TIMEOUT_SECONDS, CommandRunner
from workview.core.pipeline.parsing import load_pipeline_config, parse_daemon_status
from workview.core.pipeline.reconcile import pipeline_fingerprint, reconcile, stopped_snapshot
from workview.core.pipeline.types import PipelineConfig, PipelineSnapshot
from workview.core.time.abc import Time
from workview.core.tools import INSTALL_CHECK_TIMEOUT_SECONDS, MissingToolNotice
from workview.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "clier-pipeline.json"
DEFAULT_POLL_INTERVAL_SECONDS = 5.0


class PipelineProvider(CachedProvider[PipelineSnapshot]):
    """Keeps a reconciled pipeline snapshot for one workspace.

    ``refresh()`` starts a background fetch immediately while readers keep
    seeing the cached snapshot. The configuration file is re-read on every
    fetch so edits are picked up without restarting. When the status command
    cannot be used, every declared entity is reported stopped.
    """

    def __init__(
        self,
        *,
        runner: CommandRunner,
        time: Time,
        feedback: UserFeedback,
        workspace: Path,
        tool: str = "clier",
        config_file: str = DEFAULT_CONFIG_FILE,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        command_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        install_check_timeout_seconds: float = INSTALL_CHECK_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(
            runner=runner,
            time=time,
            workspace=workspace,
            tool=tool,
            poll_interval_seconds=poll_interval_seconds,
            command_timeout_seconds=command_timeout_seconds,
            install_check_timeout_seconds=install_check_timeout_seconds,
        )
        self._config_path = workspace / config_file
        self._notice = MissingToolNotice(tool, feedback, view_name="Pipeline")

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load_config(self) -> PipelineConfig:
        return load_pipeline_config(self._config_path)

    def refresh(self) -> None:
        self._request_fetch()

    def set_tool_installed(self, installed: bool) -> None:
        if installed:
            self._notice.report_present()
        super().set_tool_installed(installed)

    def _fingerprint_of(self, snapshot: PipelineSnapshot) -> str:
        return pipeline_fingerprint(snapshot)

    async def _fetch(self) -> PipelineSnapshot:
        config = self.load_config()
        tool_version = await self._ensure_tool_version()

        try:
            result = await self._runner.run(
                self._tool,
                ["status", "--json"],
                self._workspace,
                timeout_seconds=self._command_timeout_seconds,
            )
        except ToolMissingError:
            self._notice.report_missing()
            return stopped_snapshot(config, tool_version=tool_version)
        except ToolError as e:
            logger.debug("Pipeline status failed: %s", e)
            return stopped_snapshot(config, tool_version=tool_version)

        self._notice.report_present()
        if not result.ok:
            logger.debug("Pipeline status exited %d: %s", result.exit_code, result.stderr.strip())
            return stopped_snapshot(config, tool_version=tool_version)

        return reconcile(config, parse_daemon_status(result.stdout), tool_version=tool_version)
