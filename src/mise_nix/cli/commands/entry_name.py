"""Entry-name command: print the internal entry name for tool@version."""

import click

from mise_nix.cli.output import machine_output
from mise_nix.core.naming import entry_name


@click.command("entry-name")
@click.argument("tool")
@click.argument("version")
def entry_name_cmd(tool: str, version: str) -> None:
    """Print the sanitized entry name for TOOL at VERSION."""
    machine_output(entry_name(tool, version))
