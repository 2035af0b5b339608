"""Global configuration commands."""

from dataclasses import asdict

import click

from workview.cli.json_output import emit_json
from workview.cli.output import machine_output, user_output
from workview.core.config import CONFIG_KEYS, with_value
from workview.core.context import WorkviewContext


def _format_value(value: object) -> str:
    if isinstance(value, tuple):
        return ",".join(value)
    return str(value)


@click.group("config")
def config_group() -> None:
    """Manage workview configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output machine-readable JSON.")
@click.pass_obj
def config_show(ctx: WorkviewContext, as_json: bool) -> None:
    """Print configuration keys and values."""
    config = ctx.global_config
    if as_json:
        emit_json(
            {
                "path": ctx.config_store.path(),
                "exists": ctx.config_store.exists(),
                **asdict(config),
            }
        )
        return

    user_output(click.style("Global configuration:", bold=True))
    if not ctx.config_store.exists():
        user_output(f"  (no file at {ctx.config_store.path()}; showing defaults)")
    for key in CONFIG_KEYS:
        machine_output(f"  {key}={_format_value(getattr(config, key))}")


@config_group.command("set")
@click.argument("key", metavar="KEY", type=click.Choice(CONFIG_KEYS))
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: WorkviewContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key.

    List values (extra_path_dirs) are comma-separated.
    """
    try:
        new_config = with_value(ctx.global_config, key, value)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    ctx.config_store.save(new_config)
    ctx.feedback.success(f"Set {key}={_format_value(getattr(new_config, key))}")
