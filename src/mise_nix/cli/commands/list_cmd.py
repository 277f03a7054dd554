"""List command: show the elements of the mise-nix profile."""

import click
from rich.console import Console
from rich.table import Table

from mise_nix.cli.error_boundary import cli_error_boundary
from mise_nix.cli.json_output import ProfileEntryResponse, emit_json
from mise_nix.cli.output import user_output
from mise_nix.core.context import MiseNixContext


@click.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the entries as JSON.")
@click.pass_obj
@cli_error_boundary
def list_cmd(ctx: MiseNixContext, as_json: bool) -> None:
    """List the tools registered in the mise-nix profile."""
    entries = list(ctx.reconciler.reader.list_entries())

    if as_json:
        emit_json(
            [
                ProfileEntryResponse(
                    name=entry.entry_name,
                    reference=entry.source_reference,
                    locked_reference=entry.locked_reference,
                    store_paths=list(entry.artifact_paths),
                ).model_dump(mode="json")
                for entry in entries
            ]
        )
        return

    if not entries:
        user_output(f"No tools registered in {ctx.config.profile_path}")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("reference", no_wrap=True)
    table.add_column("store path", no_wrap=True)
    for entry in entries:
        table.add_row(entry.entry_name, entry.source_reference, entry.artifact_paths[0])

    console = Console(width=200)
    console.print(table)
