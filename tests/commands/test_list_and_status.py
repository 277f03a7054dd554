"""CLI tests for mise-nix list, status and entry-name."""

import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from mise_nix.cli.cli import cli
from mise_nix.cli.commands.list_cmd import list_cmd
from mise_nix.cli.commands.status import status_cmd
from tests.fakes.context import create_test_context
from tests.fakes.nix import FakeNix, profile_element

FULL_REV = "abc1234def5678901234567890abcdef12345678"


def _populated_nix() -> FakeNix:
    return FakeNix(
        elements={
            "hello": profile_element(
                f"github:NixOS/nixpkgs/{FULL_REV}",
                "legacyPackages.x86_64-linux.hello",
                ["/nix/store/xyz-hello"],
            )
        }
    )


def test_list_empty_profile() -> None:
    ctx = create_test_context(nix=FakeNix())

    result = CliRunner().invoke(list_cmd, [], obj=ctx, catch_exceptions=False)

    assert result.exit_code == 0
    assert "No tools registered in /test/state/mise-nix/profile" in result.stderr


def test_list_shows_table() -> None:
    ctx = create_test_context(nix=_populated_nix())

    result = CliRunner().invoke(list_cmd, [], obj=ctx, catch_exceptions=False)

    assert result.exit_code == 0
    assert "hello" in result.stdout
    assert "/nix/store/xyz-hello" in result.stdout


def test_list_json() -> None:
    ctx = create_test_context(nix=_populated_nix())

    result = CliRunner().invoke(list_cmd, ["--json"], obj=ctx, catch_exceptions=False)

    assert result.exit_code == 0
    assert json.loads(result.stdout) == [
        {
            "name": "hello",
            "reference": f"github:NixOS/nixpkgs/{FULL_REV}#hello",
            "locked_reference": f"github:NixOS/nixpkgs/{FULL_REV}#hello",
            "store_paths": ["/nix/store/xyz-hello"],
        }
    ]


def test_status_registered_reference() -> None:
    ctx = create_test_context(nix=_populated_nix())

    result = CliRunner().invoke(
        status_cmd, ["github:NixOS/nixpkgs/abc1234#hello"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0
    assert result.stdout.strip() == "registered"


def test_status_unregistered_tool() -> None:
    ctx = create_test_context(nix=_populated_nix())

    result = CliRunner().invoke(status_cmd, ["git"], obj=ctx, catch_exceptions=False)

    assert result.exit_code == 1
    assert result.stdout.strip() == "not registered"


def test_cli_group_dispatches_with_injected_context() -> None:
    ctx = create_test_context(nix=_populated_nix())

    result = CliRunner().invoke(
        cli, ["entry-name", "vscode-extensions.foo.bar", "1.0.0"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0
    assert result.stdout.strip() == "mise.vscode-extensions-foo-bar.1.0.0"


def test_cli_group_status_through_group() -> None:
    ctx = create_test_context(nix=_populated_nix())

    result = CliRunner().invoke(cli, ["status", "hello"], obj=ctx, catch_exceptions=False)

    assert result.exit_code == 0


# ============================================================================
# Error reporting
# ============================================================================

LIST_ERROR = "Command not found while trying to list profile: nix"


@pytest.mark.parametrize(
    ("command", "args"),
    [
        (list_cmd, []),
        (list_cmd, ["--json"]),
        (status_cmd, ["hello"]),
        (status_cmd, ["github:o/r#tool"]),
    ],
)
def test_unreadable_profile_is_reported_as_error(command: click.Command, args: list[str]) -> None:
    ctx = create_test_context(nix=FakeNix(elements={}, list_error=LIST_ERROR))

    result = CliRunner().invoke(command, args, obj=ctx, catch_exceptions=False)

    assert result.exit_code == 1
    assert f"Error: {LIST_ERROR}" in result.stderr
    assert result.stdout == ""


def test_malformed_config_file_is_reported_as_error(tmp_path: Path) -> None:
    config_dir = tmp_path / "config" / "mise-nix"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text("profile_path = \n", encoding="utf-8")
    env = {"XDG_CONFIG_HOME": str(tmp_path / "config"), "XDG_STATE_HOME": str(tmp_path / "state")}

    result = CliRunner().invoke(cli, ["list"], env=env, catch_exceptions=False)

    assert result.exit_code == 1
    assert "Error: Invalid config file" in result.stderr
    assert "Traceback" not in result.stderr
