"""Tests for pipeline log retrieval."""

from pathlib import Path

import pytest

from tests.fakes.command_runner import FakeCommandRunner, failed, ok
from workview.core.errors import ToolFailureError, ToolMissingError
from workview.core.pipeline.logs import (
    DAEMON_TARGET,
    LineCount,
    Since,
    build_log_args,
    fetch_logs,
    strip_ansi,
)

WORKSPACE = Path("/test/workspace")


def test_build_log_args_variants() -> None:
    """Test argument construction for each log option."""
    assert build_log_args("api", LineCount(count=50)) == ["logs", "api", "-n", "50"]
    assert build_log_args("api", LineCount(count="all")) == ["logs", "api"]
    assert build_log_args("api", Since(duration="5m")) == ["logs", "api", "--since", "5m"]
    assert build_log_args(DAEMON_TARGET, LineCount(count=10)) == [
        "logs",
        "--daemon",
        "-n",
        "10",
    ]


def test_strip_ansi_removes_color_codes() -> None:
    """Test that SGR escape sequences are removed and text is kept."""
    assert strip_ansi("\x1b[32mok\x1b[0m plain \x1b[1;31merr\x1b[m") == "ok plain err"


@pytest.mark.asyncio
async def test_fetch_logs_returns_clean_text() -> None:
    """Test that fetched log text has color codes removed."""
    runner = FakeCommandRunner(
        results={("clier", "logs", "api", "-n", "200"): ok("\x1b[33mwarn\x1b[0m line\n")}
    )

    text = await fetch_logs(
        runner, "clier", WORKSPACE, "api", LineCount(count=200), timeout_seconds=3.0
    )

    assert text == "warn line\n"
    assert runner.calls[0].timeout_seconds == 3.0
    assert runner.calls[0].cwd == WORKSPACE


@pytest.mark.asyncio
async def test_fetch_logs_failure_raises() -> None:
    """Test that a non-zero exit becomes ToolFailureError with context."""
    runner = FakeCommandRunner(
        results={("clier", "logs", "api"): failed(exit_code=2, stderr="no such process")}
    )

    with pytest.raises(ToolFailureError) as exc_info:
        await fetch_logs(
            runner, "clier", WORKSPACE, "api", LineCount(count="all"), timeout_seconds=1.0
        )

    assert "read logs for api" in str(exc_info.value)
    assert "no such process" in str(exc_info.value)
    assert exc_info.value.exit_code == 2


@pytest.mark.asyncio
async def test_fetch_logs_missing_tool_raises() -> None:
    """Test that a missing binary propagates ToolMissingError."""
    with pytest.raises(ToolMissingError):
        await fetch_logs(
            FakeCommandRunner(),
            "clier",
            WORKSPACE,
            DAEMON_TARGET,
            Since(duration="1h"),
            timeout_seconds=1.0,
        )
