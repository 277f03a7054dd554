"""Application context with dependency injection."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from mise_nix.core.config import MiseNixConfig, load_config
from mise_nix.core.filesystem import Filesystem, RealFilesystem
from mise_nix.core.nix.abc import Nix
from mise_nix.core.nix.real import RealNix
from mise_nix.core.reconcile import ProfileReconciler


@dataclass(frozen=True)
class MiseNixContext:
    """Immutable context holding all dependencies for mise-nix operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    nix: Nix
    filesystem: Filesystem
    config: MiseNixConfig

    @property
    def reconciler(self) -> ProfileReconciler:
        """Reconciler bound to this context's Nix integration."""
        return ProfileReconciler(self.nix)


def create_context(environ: Mapping[str, str] | None = None) -> MiseNixContext:
    """Create production context with real implementations.

    Called once at CLI entry point. This is the only place the process
    environment is read.

    Args:
        environ: Environment mapping; defaults to os.environ

    Returns:
        MiseNixContext with real implementations

    Raises:
        ConfigError: If the config file is malformed
    """
    env = dict(os.environ) if environ is None else dict(environ)
    config = load_config(env)
    return MiseNixContext(
        nix=RealNix(config, environ=env),
        filesystem=RealFilesystem(),
        config=config,
    )
