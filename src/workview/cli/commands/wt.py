"""Worktree view commands."""

import asyncio

import click

from workview.cli.json_output import emit_model
from workview.cli.json_schemas import worktree_list_response
from workview.cli.rendering import render_view
from workview.core.context import WorkviewContext
from workview.core.view import ViewModel, build_worktree_view
from workview.core.visibility import Namespace
from workview.core.worktrees.provider import WorktreeProvider
from workview.core.worktrees.types import WorktreeSnapshot

VIEW_TITLE = "Worktrees"


async def worktree_view(ctx: WorkviewContext, provider: WorktreeProvider) -> ViewModel:
    """Build the current worktree view, skipping all fetching when the tool is missing."""
    if not provider.tool_installed:
        return build_worktree_view(
            WorktreeSnapshot(tool_version="", worktrees=()), ctx.visibility, tool_installed=False
        )
    snapshot = await provider.get_snapshot()
    return build_worktree_view(snapshot, ctx.visibility)


async def _list_worktrees(ctx: WorkviewContext) -> tuple[ViewModel, bool]:
    provider = ctx.worktree_provider()
    installed = await ctx.is_installed(provider.tool)
    provider.set_tool_installed(installed)
    return await worktree_view(ctx, provider), installed


@click.group("wt")
def wt_group() -> None:
    """Show git worktrees and their agent status."""


@wt_group.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output machine-readable JSON.")
@click.pass_obj
def list_wt(ctx: WorkviewContext, as_json: bool) -> None:
    """List worktrees, main first, with agent and diff status."""
    view, installed = asyncio.run(_list_worktrees(ctx))
    if as_json:
        emit_model(worktree_list_response(view, tool_installed=installed))
        return
    render_view(VIEW_TITLE, view)


@wt_group.command("hide")
@click.argument("branch")
@click.pass_obj
def hide_wt(ctx: WorkviewContext, branch: str) -> None:
    """Hide the worktree checked out on BRANCH."""
    ctx.visibility.hide(Namespace.WORKTREES, branch)
    ctx.feedback.success(f"Hidden worktree '{branch}'")


@wt_group.command("unhide")
@click.argument("branch")
@click.pass_obj
def unhide_wt(ctx: WorkviewContext, branch: str) -> None:
    """Show the worktree checked out on BRANCH again."""
    ctx.visibility.unhide(Namespace.WORKTREES, branch)
    ctx.feedback.success(f"Unhidden worktree '{branch}'")


@wt_group.command("toggle-hidden")
@click.pass_obj
def toggle_hidden_wt(ctx: WorkviewContext) -> None:
    """Toggle whether hidden worktrees are listed."""
    showing = ctx.visibility.toggle_show_hidden(Namespace.WORKTREES)
    state = "shown" if showing else "not shown"
    ctx.feedback.info(f"Hidden worktrees are now {state}")
