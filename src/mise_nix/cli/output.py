"""Output utilities for CLI commands with clear intent.

user_output goes to stderr (progress, diagnostics) so that stdout carries
only results a calling script can parse.
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Emit a user-facing message on stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Emit a machine-readable result on stdout."""
    click.echo(message, nl=nl)
