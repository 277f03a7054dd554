"""Status command: check whether a tool or reference is registered."""

import click

from mise_nix.cli.error_boundary import cli_error_boundary
from mise_nix.cli.output import machine_output
from mise_nix.core.context import MiseNixContext


@click.command("status")
@click.argument("reference_or_tool")
@click.pass_obj
@cli_error_boundary
def status_cmd(ctx: MiseNixContext, reference_or_tool: str) -> None:
    """Exit 0 if REFERENCE_OR_TOOL is in the profile, 1 otherwise."""
    if ctx.reconciler.is_registered(reference_or_tool):
        machine_output("registered")
        return
    machine_output("not registered")
    raise SystemExit(1)
