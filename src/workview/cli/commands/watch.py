"""Continuously poll and re-render views when their data or visibility changes."""

import asyncio
import logging

import click

from workview.cli.commands.pipeline import VIEW_TITLE as PIPELINE_TITLE
from workview.cli.commands.pipeline import pipeline_view
from workview.cli.commands.wt import VIEW_TITLE as WORKTREES_TITLE
from workview.cli.commands.wt import worktree_view
from workview.cli.output import user_output
from workview.cli.rendering import render_view
from workview.core.cached_provider import CachedProvider
from workview.core.context import WorkviewContext
from workview.core.pipeline.provider import PipelineProvider
from workview.core.scheduling import PollingLoop
from workview.core.visibility import Namespace
from workview.core.worktrees.provider import WorktreeProvider

logger = logging.getLogger(__name__)

VisibilityState = tuple[frozenset[str], bool]


def _visibility_state(ctx: WorkviewContext, namespace: Namespace) -> VisibilityState:
    return ctx.visibility.hidden(namespace), ctx.visibility.showing_hidden(namespace)


async def watch_views(
    ctx: WorkviewContext,
    *,
    worktrees: bool,
    pipeline: bool,
    max_renders: int | None = None,
) -> int:
    """Render the selected views, then re-render each time a provider reports a change.

    Hide, unhide and show-hidden changes force a refresh of the matching view.
    Changes written to the state file by another workview process are picked
    up on the next poll interval.

    Args:
        ctx: Application context
        worktrees: Include the worktree view
        pipeline: Include the pipeline view
        max_renders: Stop after this many renders (None = until cancelled)

    Returns:
        Number of renders performed
    """
    worktree_provider: WorktreeProvider | None = None
    pipeline_provider: PipelineProvider | None = None
    watched: dict[Namespace, CachedProvider] = {}
    if worktrees:
        worktree_provider = ctx.worktree_provider()
        worktree_provider.set_tool_installed(await ctx.is_installed(worktree_provider.tool))
        watched[Namespace.WORKTREES] = worktree_provider
    if pipeline:
        pipeline_provider = ctx.pipeline_provider()
        pipeline_provider.set_tool_installed(await ctx.is_installed(pipeline_provider.tool))
        watched[Namespace.PROCESSES] = pipeline_provider

    changed = asyncio.Event()
    for provider in watched.values():
        provider.on_change(changed.set)
        provider.set_visible(True)

    seen_visibility: dict[Namespace, VisibilityState] = {}
    disposed = False

    def on_visibility_change(namespace: Namespace) -> None:
        provider = watched.get(namespace)
        if provider is None or disposed:
            return
        seen_visibility[namespace] = _visibility_state(ctx, namespace)
        provider.force_refresh()

    def check_visibility() -> None:
        for namespace in watched:
            if seen_visibility.get(namespace) != _visibility_state(ctx, namespace):
                logger.debug("Visibility of %s changed on disk", namespace.value)
                on_visibility_change(namespace)

    ctx.visibility.on_change(on_visibility_change)
    visibility_polling = PollingLoop(
        ctx.global_config.poll_interval_seconds, check_visibility, ctx.time
    )
    visibility_polling.start()

    renders = 0
    try:
        while max_renders is None or renders < max_renders:
            if renders > 0:
                await changed.wait()
                user_output()
            changed.clear()
            for namespace in watched:
                seen_visibility[namespace] = _visibility_state(ctx, namespace)
            if worktree_provider is not None:
                render_view(WORKTREES_TITLE, await worktree_view(ctx, worktree_provider))
            if pipeline_provider is not None:
                render_view(PIPELINE_TITLE, await pipeline_view(ctx, pipeline_provider))
            renders += 1
    finally:
        disposed = True
        visibility_polling.stop()
        for provider in watched.values():
            provider.dispose()
    logger.debug("Watch finished after %d renders", renders)
    return renders


@click.command("watch")
@click.option("--worktrees/--no-worktrees", default=True, help="Include the worktree view.")
@click.option("--pipeline/--no-pipeline", default=True, help="Include the pipeline view.")
@click.pass_obj
def watch_cmd(ctx: WorkviewContext, worktrees: bool, pipeline: bool) -> None:
    """Poll in the background and re-render only when something changes.

    Press Ctrl-C to stop.
    """
    if not worktrees and not pipeline:
        raise click.UsageError("Nothing to watch: enable --worktrees or --pipeline.")
    try:
        asyncio.run(watch_views(ctx, worktrees=worktrees, pipeline=pipeline))
    except KeyboardInterrupt:
        user_output("Stopped watching.")
