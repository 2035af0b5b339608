import logging
from pathlib import Path

import click

from workview.cli.commands.config import config_group
from workview.cli.commands.pipeline import pipeline_group
from workview.cli.commands.watch import watch_cmd
from workview.cli.commands.wt import wt_group
from workview.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_LOG_FORMAT = "[DEBUG %(name)s:%(lineno)d] %(message)s"


def configure_debug_logging() -> None:
    logging.basicConfig(level=logging.DEBUG, format=DEBUG_LOG_FORMAT)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="workview")
@click.option(
    "--debug",
    is_flag=True,
    envvar="WORKVIEW_DEBUG",
    help="Log every external command and fallback to stderr (also WORKVIEW_DEBUG=1).",
)
@click.option("-q", "--quiet", is_flag=True, help="Only print warnings and errors.")
@click.option(
    "-C",
    "--workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Workspace root (defaults to the current directory).",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, quiet: bool, workspace: Path | None) -> None:
    """Watch git worktrees and a clier pipeline from the terminal."""
    if debug:
        configure_debug_logging()
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        root = (workspace if workspace is not None else Path.cwd()).resolve()
        try:
            ctx.obj = create_context(workspace=root, quiet=quiet)
        except ValueError as e:
            raise click.ClickException(str(e)) from e


cli.add_command(config_group)
cli.add_command(pipeline_group)
cli.add_command(watch_cmd)
cli.add_command(wt_group)


def main() -> None:
    """CLI entry point used by the `workview` console script."""
    cli()
