"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
with consistent, user-friendly error messages. All errors use red "Error:" prefix
for visual consistency.
"""

from typing import TYPE_CHECKING

import click

from mise_nix.cli.output import user_output

if TYPE_CHECKING:
    from mise_nix.core.context import MiseNixContext


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)

    @staticmethod
    def nix_available(ctx: "MiseNixContext") -> None:
        """Ensure the nix binary is installed, otherwise output styled error and exit.

        Raises:
            SystemExit: If nix is not on PATH
        """
        Ensure.invariant(
            ctx.nix.is_available(),
            "Nix is not installed or not in PATH. Please install Nix first.",
        )
