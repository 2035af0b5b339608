"""Output utilities for CLI commands with clear intent.

Human-readable messages go to stderr and machine-readable data to stdout, so
``--json`` output stays parseable when warnings are printed.
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Print a message meant for a person (stderr)."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Print data meant for another program (stdout)."""
    click.echo(message, nl=nl)
