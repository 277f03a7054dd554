import logging

import click

from mise_nix.cli.commands.entry_name import entry_name_cmd
from mise_nix.cli.commands.install import install_cmd
from mise_nix.cli.commands.list_cmd import list_cmd
from mise_nix.cli.commands.status import status_cmd
from mise_nix.cli.commands.uninstall import uninstall_cmd
from mise_nix.cli.error_boundary import cli_error_boundary
from mise_nix.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="mise-nix")
@click.option(
    "--debug",
    is_flag=True,
    envvar="MISE_NIX_DEBUG",
    help="Log Nix invocations and reconciliation decisions to stderr.",
)
@click.pass_context
@cli_error_boundary
def cli(ctx: click.Context, debug: bool) -> None:
    """Resolve flake references to store paths through a dedicated Nix profile."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(install_cmd)
cli.add_command(uninstall_cmd)
cli.add_command(list_cmd)
cli.add_command(status_cmd)
cli.add_command(entry_name_cmd)


def main() -> None:
    """CLI entry point used by the `mise-nix` console script."""
    cli()
