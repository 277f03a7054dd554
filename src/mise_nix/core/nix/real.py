"""Real Nix operations using subprocess to call the nix CLI.

All commands run against the dedicated mise-nix profile from configuration,
never the user's default profile.
"""

import logging
import shutil
from collections.abc import Mapping

from mise_nix.core.config import MiseNixConfig
from mise_nix.core.errors import BuildFailedError
from mise_nix.core.nix.abc import Nix
from mise_nix.core.nix.types import RegistrationResult, RegistrationStatus
from mise_nix.core.subprocess_utils import combined_output, run_subprocess_with_context

logger = logging.getLogger(__name__)

# Fragments of `nix profile install` errors that mean the element is already there
_ALREADY_PRESENT_MARKERS = ("already installed", "already provides")


class RealNix(Nix):
    """Production implementation using the nix CLI via subprocess.

    Example:
        nix = RealNix(config, environ=os.environ)
        if not nix.is_available():
            raise RuntimeError("Nix is not installed")
        stdout = nix.build("nixpkgs#hello")
    """

    def __init__(self, config: MiseNixConfig, environ: Mapping[str, str]) -> None:
        """Create RealNix.

        Args:
            config: Loaded configuration (profile path, impure settings)
            environ: Base environment for child processes
        """
        self._config = config
        self._env = {**environ, **config.build_env()}

    def _impure_args(self) -> list[str]:
        return ["--impure"] if self._config.impure else []

    def is_available(self) -> bool:
        return shutil.which("nix") is not None

    def profile_exists(self) -> bool:
        # Nix profiles are symlinks to the current generation
        return self._config.profile_path.is_symlink()

    def build(self, reference: str) -> str:
        cmd = ["nix", "build", *self._impure_args(), "--no-link", "--print-out-paths", reference]
        logger.debug("Build command: %s", " ".join(cmd))

        result = run_subprocess_with_context(
            cmd, operation_context=f"build {reference}", env=self._env, check=False
        )
        if result.returncode != 0 or not result.stdout.strip():
            raise BuildFailedError(reference, combined_output(result))
        return result.stdout

    def register(self, reference: str) -> RegistrationResult:
        profile_path = self._config.profile_path
        try:
            profile_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return RegistrationResult(RegistrationStatus.FAILED, str(e))

        cmd = [
            "nix",
            "profile",
            "install",
            *self._impure_args(),
            "--profile",
            str(profile_path),
            reference,
        ]
        logger.debug("Install command: %s", " ".join(cmd))

        result = run_subprocess_with_context(
            cmd, operation_context=f"register {reference}", env=self._env, check=False
        )
        if result.returncode == 0:
            return RegistrationResult(RegistrationStatus.REGISTERED)

        diagnostic = combined_output(result)
        lowered = diagnostic.lower()
        if any(marker in lowered for marker in _ALREADY_PRESENT_MARKERS):
            return RegistrationResult(RegistrationStatus.ALREADY_PRESENT, diagnostic)
        return RegistrationResult(RegistrationStatus.FAILED, diagnostic)

    def list_registry(self) -> str:
        if not self.profile_exists():
            return ""

        cmd = ["nix", "profile", "list", "--json", "--profile", str(self._config.profile_path)]
        result = run_subprocess_with_context(
            cmd, operation_context="list profile", env=self._env, check=False
        )
        if result.returncode != 0:
            logger.debug("Profile listing failed: %s", combined_output(result))
            return ""
        return result.stdout

    def remove_registry_entry(self, pattern: str) -> bool:
        cmd = [
            "nix",
            "profile",
            "remove",
            "--profile",
            str(self._config.profile_path),
            "--regex",
            pattern,
        ]
        logger.debug("Remove command: %s", " ".join(cmd))

        result = run_subprocess_with_context(
            cmd, operation_context=f"remove {pattern}", env=self._env, check=False
        )
        if result.returncode != 0:
            logger.debug("Profile removal failed: %s", combined_output(result))
            return False
        return True
