"""Pipeline view commands."""

import asyncio
from typing import Literal

import click

from workview.cli.json_output import emit_model
from workview.cli.json_schemas import pipeline_status_response
from workview.cli.output import machine_output
from workview.cli.rendering import render_view
from workview.core.context import WorkviewContext
from workview.core.errors import ToolError
from workview.core.pipeline.logs import (
    DAEMON_TARGET,
    DEFAULT_LOG_LINES,
    LineCount,
    LogOption,
    Since,
    fetch_logs,
)
from workview.core.pipeline.provider import PipelineProvider
from workview.core.pipeline.reconcile import stopped_snapshot
from workview.core.view import ViewModel, build_pipeline_view
from workview.core.visibility import Namespace

VIEW_TITLE = "Pipeline"


async def pipeline_view(ctx: WorkviewContext, provider: PipelineProvider) -> ViewModel:
    """Build the current pipeline view, skipping the status call when the tool is missing."""
    if not provider.tool_installed:
        return build_pipeline_view(
            stopped_snapshot(provider.load_config()), ctx.visibility, tool_installed=False
        )
    snapshot = await provider.get_snapshot()
    return build_pipeline_view(snapshot, ctx.visibility)


async def _pipeline_status(ctx: WorkviewContext) -> tuple[ViewModel, bool]:
    provider = ctx.pipeline_provider()
    installed = await ctx.is_installed(provider.tool)
    provider.set_tool_installed(installed)
    return await pipeline_view(ctx, provider), installed


def _parse_lines(value: str) -> int | Literal["all"]:
    if value == "all":
        return "all"
    try:
        count = int(value)
    except ValueError:
        raise click.BadParameter(f"expected a number or 'all', got '{value}'") from None
    if count <= 0:
        raise click.BadParameter("must be positive")
    return count


@click.group("pipeline")
def pipeline_group() -> None:
    """Show the pipeline daemon, its stages, and processes."""


@pipeline_group.command("status")
@click.option("--json", "as_json", is_flag=True, help="Output machine-readable JSON.")
@click.pass_obj
def status_pipeline(ctx: WorkviewContext, as_json: bool) -> None:
    """Show declared stages and processes merged with live daemon status."""
    view, installed = asyncio.run(_pipeline_status(ctx))
    if as_json:
        emit_model(pipeline_status_response(view, tool_installed=installed))
        return
    render_view(VIEW_TITLE, view)


@pipeline_group.command("hide")
@click.argument("name")
@click.pass_obj
def hide_process(ctx: WorkviewContext, name: str) -> None:
    """Hide process NAME."""
    ctx.visibility.hide(Namespace.PROCESSES, name)
    ctx.feedback.success(f"Hidden process '{name}'")


@pipeline_group.command("unhide")
@click.argument("name")
@click.pass_obj
def unhide_process(ctx: WorkviewContext, name: str) -> None:
    """Show process NAME again."""
    ctx.visibility.unhide(Namespace.PROCESSES, name)
    ctx.feedback.success(f"Unhidden process '{name}'")


@pipeline_group.command("toggle-hidden")
@click.pass_obj
def toggle_hidden_processes(ctx: WorkviewContext) -> None:
    """Toggle whether hidden processes are listed."""
    showing = ctx.visibility.toggle_show_hidden(Namespace.PROCESSES)
    state = "shown" if showing else "not shown"
    ctx.feedback.info(f"Hidden processes are now {state}")


@pipeline_group.command("logs")
@click.argument("name", required=False)
@click.option("--daemon", "daemon", is_flag=True, help="Show the daemon's own log.")
@click.option(
    "-n",
    "--lines",
    "lines",
    default=None,
    metavar="N|all",
    help=f"Number of lines to show (default {DEFAULT_LOG_LINES}), or 'all'.",
)
@click.option("--since", "since", default=None, metavar="DURATION", help="e.g. 5m, 1h.")
@click.pass_obj
def logs_pipeline(
    ctx: WorkviewContext,
    name: str | None,
    daemon: bool,
    lines: str | None,
    since: str | None,
) -> None:
    """Print recent log output of process NAME, or of the daemon."""
    if daemon == (name is not None):
        raise click.UsageError("Pass either a process NAME or --daemon.")
    if lines is not None and since is not None:
        raise click.UsageError("--lines and --since cannot be combined.")

    option: LogOption
    if since is not None:
        option = Since(duration=since)
    elif lines is not None:
        option = LineCount(count=_parse_lines(lines))
    else:
        option = LineCount(count=DEFAULT_LOG_LINES)

    target = DAEMON_TARGET if name is None else name
    try:
        text = asyncio.run(
            fetch_logs(
                ctx.runner,
                ctx.global_config.pipeline_tool,
                ctx.workspace,
                target,
                option,
                timeout_seconds=ctx.global_config.command_timeout_seconds,
            )
        )
    except ToolError as e:
        raise click.ClickException(str(e)) from e
    machine_output(text, nl=False)
