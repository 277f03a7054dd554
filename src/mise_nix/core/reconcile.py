"""Reconciliation of install requests against the mise-nix profile.

The reconciler decides whether a flake reference has to be built at all,
builds and registers it when it does, and removes profile elements on
uninstall. Building and registering are two separate Nix invocations and the
pair is not atomic; the reconciler holds no lock across them, so two
processes resolving the same reference may both build it. The second
registration is then reported as already present and treated as success.
"""

import logging

from mise_nix.core.errors import NoOutputsError
from mise_nix.core.naming import registry_key, removal_pattern
from mise_nix.core.nix.abc import Nix
from mise_nix.core.nix.types import RegistrationStatus
from mise_nix.core.profile.reader import ProfileReader
from mise_nix.core.reference import apply_version_hint, is_reference

logger = logging.getLogger(__name__)


def parse_build_outputs(stdout: str) -> tuple[str, ...]:
    """Collect the absolute store paths printed by a build, one per line."""
    outputs: list[str] = []
    for line in stdout.splitlines():
        candidate = line.strip()
        if candidate.startswith("/"):
            outputs.append(candidate)
    return tuple(outputs)


class ProfileReconciler:
    """Build-once, register-once resolution of flake references.

    Example:
        reconciler = ProfileReconciler(RealNix(config, os.environ))
        outputs = reconciler.resolve_and_register("github:owner/repo#tool", "v1.2.0")
    """

    def __init__(self, nix: Nix) -> None:
        self._nix = nix
        self._reader = ProfileReader(nix)

    @property
    def reader(self) -> ProfileReader:
        """Read access to the profile this reconciler maintains."""
        return self._reader

    def resolve_and_register(self, reference: str, version_hint: str | None) -> tuple[str, ...]:
        """Resolve a flake reference to store paths, building only on a miss.

        Steps:
        1. Pin the reference to the version hint
        2. Return the recorded store paths if the profile already has it
        3. Build it (BuildFailedError aborts)
        4. Collect the store paths from the build output (NoOutputsError aborts)
        5. Register it in the profile; failures here only log a warning
        6. Return the store paths from step 4

        Args:
            reference: Flake reference requested by the user
            version_hint: Requested version, applied to the reference

        Returns:
            Store paths of the artifact, non-empty

        Raises:
            BuildFailedError: If the build fails
            NoOutputsError: If the build reports no store paths
        """
        build_reference = apply_version_hint(reference, version_hint)
        if build_reference != reference:
            logger.debug("Pinned %s to %s", reference, build_reference)

        existing = self._reader.find_by_reference(build_reference)
        if existing is not None:
            logger.debug("Already registered, skipping build: %s", build_reference)
            return existing

        logger.debug("Building %s", build_reference)
        stdout = self._nix.build(build_reference)

        outputs = parse_build_outputs(stdout)
        if not outputs:
            raise NoOutputsError(build_reference)

        result = self._nix.register(build_reference)
        if result.status == RegistrationStatus.ALREADY_PRESENT:
            logger.debug("Profile already contains %s: %s", build_reference, result.diagnostic)
        elif result.status == RegistrationStatus.FAILED:
            logger.warning(
                "Built %s but could not register it in the profile: %s",
                build_reference,
                result.diagnostic or "unknown error",
            )

        return outputs

    def remove(self, tool: str) -> bool:
        """Remove a tool's elements from the profile, best effort.

        Matches the tool's registry key and its numeric-suffix duplicates.
        Never raises for Nix-level failures.

        Returns:
            True if the profile is uninitialized or the removal succeeded,
            False if the removal command failed
        """
        if not self._nix.profile_exists():
            logger.debug("Profile does not exist, nothing to remove")
            return True

        pattern = removal_pattern(tool)
        if self._nix.remove_registry_entry(pattern):
            return True

        logger.warning("Could not remove %s from the profile (pattern %s)", tool, pattern)
        return False

    def has_entry_for_tool(self, tool: str) -> bool:
        """Check whether any element would be matched by ``remove(tool)``."""
        return self._reader.find_by_entry_name(registry_key(tool), allow_numeric_suffix=True)

    def is_registered(self, reference_or_tool: str) -> bool:
        """Check whether a flake reference or tool name has a profile element.

        References are compared against recorded references (revision aware);
        plain tool names are looked up by element name.
        """
        if is_reference(reference_or_tool):
            return self._reader.find_by_reference(reference_or_tool) is not None
        return self.has_entry_for_tool(reference_or_tool)
