"""Output utilities for CLI commands with clear intent.

user_output() is for humans and goes to stderr; machine_output() is for
anything a shell wrapper or pipe consumes and goes to stdout.
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Write human-readable text to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Write machine-consumable text to stdout."""
    click.echo(message, nl=nl)
