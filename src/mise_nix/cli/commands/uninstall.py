"""Uninstall command: best-effort removal from the mise-nix profile."""

import click

from mise_nix.cli.error_boundary import cli_error_boundary
from mise_nix.cli.output import user_output
from mise_nix.core.context import MiseNixContext


@click.command("uninstall")
@click.argument("tool")
@click.pass_obj
@cli_error_boundary
def uninstall_cmd(ctx: MiseNixContext, tool: str) -> None:
    """Remove TOOL and its numbered duplicates from the mise-nix profile.

    Exits 0 whether or not removal succeeds, so the rest of an uninstall
    sequence can proceed. Only an unreadable profile is an error.
    """
    reconciler = ctx.reconciler
    user_output(f"Removing {tool} from nix profile...")

    if not reconciler.has_entry_for_tool(tool):
        user_output(f"Entry not found in profile for tool: {tool}")
        return

    if reconciler.remove(tool):
        user_output(click.style(f"Removed from nix profile: {tool}", fg="green"))
    else:
        user_output(click.style(f"Could not remove from nix profile: {tool}", fg="yellow"))
