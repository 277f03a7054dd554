"""Error boundary handling for CLI commands.

This module provides a decorator to catch well-known exceptions at CLI entry
points and display clean error messages without stack traces.
"""

import functools
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import click

from mise_nix.cli.output import user_output
from mise_nix.core.errors import BuildFailedError, MiseNixError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Callable[..., Any])


def cli_error_boundary(func: T) -> T:
    """Decorator that catches well-known exceptions and displays clean error messages.

    Catches:
        - BuildFailedError: shown as a short prefix plus the builder's own text
        - MiseNixError: other fatal resolution and configuration errors
        - RuntimeError: subprocess failures enriched by the integration layer

    All other exceptions bubble up normally with full stack traces.

    Example:
        @click.command()
        @cli_error_boundary
        def my_command():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except BuildFailedError as e:
            logger.debug("Build failed", exc_info=True)
            user_output(
                click.style("Error: ", fg="red")
                + f"Failed to build {e.reference}:\n{e.diagnostic or 'unknown error'}"
            )
            raise SystemExit(1) from None
        except MiseNixError as e:
            logger.debug("Operation failed", exc_info=True)
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from None
        except RuntimeError as e:
            logger.debug("Subprocess failed", exc_info=True)
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
