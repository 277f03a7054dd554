"""Install command: resolve a tool to a store path via the profile."""

import click

from mise_nix.cli.ensure import Ensure
from mise_nix.cli.error_boundary import cli_error_boundary
from mise_nix.cli.json_output import InstallResponse, emit_json
from mise_nix.cli.output import machine_output, user_output
from mise_nix.core.config import MiseNixConfig
from mise_nix.core.context import MiseNixContext
from mise_nix.core.output_selector import choose_output, verify_artifact
from mise_nix.core.reference import apply_version_hint, is_hex_token, is_reference

# Hints that leave a nixpkgs reference on whatever revision the registry resolves
_UNPINNED_HINTS = ("", "latest")


def resolve_request(
    config: MiseNixConfig, tool: str, version_hint: str | None
) -> tuple[str, str | None]:
    """Turn a (tool, version) request into a flake reference and version hint.

    - A tool that is itself a flake reference is used as-is
    - A version that is a flake reference replaces the tool (``tool@github:o/r#x``)
    - A plain tool name becomes ``<nixpkgs>#<tool>``, pinned to the version when
      it is a nixpkgs commit hash

    Returns:
        Tuple of (flake reference, version hint to apply)

    Raises:
        SystemExit: If a plain tool is requested with a release version, which
            needs version resolution this command does not do
    """
    if is_reference(tool):
        return tool, version_hint
    if version_hint is not None and is_reference(version_hint):
        return version_hint, None

    reference = f"{config.nixpkgs_flake_base}#{tool}"
    if version_hint is None or version_hint in _UNPINNED_HINTS:
        return reference, None
    Ensure.invariant(
        is_hex_token(version_hint),
        f"Cannot resolve {tool}@{version_hint}: pass a flake reference "
        "or a nixpkgs commit hash as the version",
    )
    return reference, version_hint


@click.command("install")
@click.argument("tool")
@click.option("--version", "version_hint", default=None, help="Version, tag or commit to pin.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.pass_obj
@cli_error_boundary
def install_cmd(ctx: MiseNixContext, tool: str, version_hint: str | None, as_json: bool) -> None:
    """Build TOOL once and register it in the mise-nix profile.

    TOOL is a flake reference (github:owner/repo#pkg) or a nixpkgs attribute.
    Prints the primary store path on stdout.
    """
    Ensure.nix_available(ctx)

    reference, hint = resolve_request(ctx.config, tool, version_hint)
    build_reference = apply_version_hint(reference, hint)
    user_output(f"Installing {build_reference}...")

    outputs = ctx.reconciler.resolve_and_register(reference, hint)
    store_path, has_bin = choose_output(ctx.filesystem, outputs)
    binaries = verify_artifact(ctx.filesystem, store_path)

    if binaries:
        user_output("Installed binaries: " + ", ".join(binaries))
    elif has_bin:
        user_output("Installed package contains a /bin directory but it is empty.")
    user_output(click.style(f"Successfully installed {build_reference}", fg="green"))

    if as_json:
        response = InstallResponse(
            reference=build_reference,
            store_path=store_path,
            has_bin=has_bin,
            outputs=list(outputs),
            binaries=binaries,
        )
        emit_json(response.model_dump(mode="json"))
        return
    machine_output(store_path)
