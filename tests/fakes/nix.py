"""Fake implementation of Nix for testing.

This fake keeps the profile as an in-memory mapping of element name to
listing element (the version 3 shape of ``nix profile list --json``), so the
real ProfileReader parses exactly what the real integration would return.
"""

import json
import re
from typing import Any

from mise_nix.core.errors import BuildFailedError
from mise_nix.core.naming import registry_key
from mise_nix.core.nix.abc import Nix
from mise_nix.core.nix.types import RegistrationResult, RegistrationStatus

FAKE_SYSTEM = "x86_64-linux"

_QUALIFIED_PREFIXES = ("packages.", "legacyPackages.", "defaultPackage.")


def profile_element(
    original_url: str,
    attr_path: str,
    store_paths: list[str],
    *,
    url: str | None = None,
) -> dict[str, Any]:
    """Build one listing element the way Nix serializes it."""
    return {
        "active": True,
        "attrPath": attr_path,
        "originalUrl": original_url,
        "outputs": None,
        "priority": 5,
        "storePaths": store_paths,
        "url": url if url is not None else original_url,
    }


def resolved_attribute(attribute: str, system: str = FAKE_SYSTEM) -> str:
    """Expand an attribute the way Nix records it in the profile.

    ``tool`` becomes ``packages.<system>.tool`` and an empty attribute the
    default package; already qualified paths are kept.
    """
    if not attribute or attribute == "default":
        return f"packages.{system}.default"
    if attribute.startswith(_QUALIFIED_PREFIXES):
        return attribute
    return f"packages.{system}.{attribute}"


class FakeNix(Nix):
    """In-memory fake implementation of Nix build and profile operations.

    Constructor Injection:
    - Build results, profile contents and failure modes are given up front
    - Profile writes (register, remove) mutate the in-memory elements so
      later reads observe them, like the real profile

    When to Use:
    - Testing build-once/register-once reconciliation
    - Simulating build failures, registration failures, failed removals
    - Testing CLI commands without a Nix installation

    Examples:
        >>> nix = FakeNix(build_outputs={"nixpkgs#hello": "/nix/store/abc-hello\\n"})
        >>> nix.build("nixpkgs#hello")
        '/nix/store/abc-hello\\n'
        >>> nix.register("nixpkgs#hello").status
        <RegistrationStatus.REGISTERED: 'registered'>
    """

    def __init__(
        self,
        *,
        available: bool = True,
        elements: dict[str, dict[str, Any]] | None = None,
        profile_initialized: bool | None = None,
        build_outputs: dict[str, str] | None = None,
        build_failures: dict[str, str] | None = None,
        registration_result: RegistrationResult | None = None,
        remove_succeeds: bool = True,
        raw_listing: str | None = None,
        list_error: str | None = None,
    ) -> None:
        """Initialize fake with predetermined Nix state.

        Args:
            available: Value returned by is_available()
            elements: Initial profile elements keyed by element name
            profile_initialized: Whether the profile exists; defaults to True
                when elements are given, False otherwise
            build_outputs: Mapping of reference to raw build stdout. References
                not in the mapping build to a single synthetic store path
            build_failures: Mapping of reference to the diagnostic its build
                fails with
            registration_result: Forced result for register(); when it is not
                REGISTERED the profile is left unchanged
            remove_succeeds: Whether remove_registry_entry() reports success
            raw_listing: Listing returned verbatim instead of the elements
            list_error: Message of a RuntimeError raised by list_registry(), as
                the real integration raises when the nix binary cannot run
        """
        self._available = available
        self._elements: dict[str, dict[str, Any]] = dict(elements or {})
        if profile_initialized is None:
            profile_initialized = elements is not None
        self._profile_initialized = profile_initialized
        self._build_outputs = build_outputs or {}
        self._build_failures = build_failures or {}
        self._registration_result = registration_result
        self._remove_succeeds = remove_succeeds
        self._raw_listing = raw_listing
        self._list_error = list_error

        self._build_calls: list[str] = []
        self._register_calls: list[str] = []
        self._remove_calls: list[str] = []
        self._list_calls = 0

    def is_available(self) -> bool:
        return self._available

    def profile_exists(self) -> bool:
        return self._profile_initialized

    def build(self, reference: str) -> str:
        self._build_calls.append(reference)
        if reference in self._build_failures:
            raise BuildFailedError(reference, self._build_failures[reference])
        return self.build_output_for(reference)

    def register(self, reference: str) -> RegistrationResult:
        self._register_calls.append(reference)
        if (
            self._registration_result is not None
            and self._registration_result.status != RegistrationStatus.REGISTERED
        ):
            return self._registration_result

        location, _, attribute = reference.partition("#")
        store_paths = [
            line.strip() for line in self.build_output_for(reference).splitlines() if line.strip()
        ]
        self._elements[self._free_name(registry_key(reference))] = profile_element(
            location, resolved_attribute(attribute), store_paths
        )
        self._profile_initialized = True
        return RegistrationResult(RegistrationStatus.REGISTERED)

    def list_registry(self) -> str:
        self._list_calls += 1
        if self._list_error is not None:
            raise RuntimeError(self._list_error)
        if self._raw_listing is not None:
            return self._raw_listing
        if not self._profile_initialized:
            return ""
        return json.dumps({"version": 3, "elements": self._elements})

    def remove_registry_entry(self, pattern: str) -> bool:
        self._remove_calls.append(pattern)
        if not self._remove_succeeds:
            return False
        regex = re.compile(pattern)
        for name in [name for name in self._elements if regex.fullmatch(name)]:
            del self._elements[name]
        return True

    def build_output_for(self, reference: str) -> str:
        """Raw stdout a build of reference produces (without recording a call)."""
        if reference in self._build_outputs:
            return self._build_outputs[reference]
        return f"/nix/store/fake-{registry_key(reference)}\n"

    def _free_name(self, key: str) -> str:
        # Nix appends -1, -2, ... when a name is already taken
        if key not in self._elements:
            return key
        suffix = 1
        while f"{key}-{suffix}" in self._elements:
            suffix += 1
        return f"{key}-{suffix}"

    @property
    def elements(self) -> dict[str, dict[str, Any]]:
        """Current profile elements, keyed by element name.

        Returns a copy to prevent external mutation.
        """
        return dict(self._elements)

    @property
    def build_calls(self) -> list[str]:
        """References passed to build(), in call order."""
        return list(self._build_calls)

    @property
    def register_calls(self) -> list[str]:
        """References passed to register(), in call order."""
        return list(self._register_calls)

    @property
    def remove_calls(self) -> list[str]:
        """Patterns passed to remove_registry_entry(), in call order."""
        return list(self._remove_calls)

    @property
    def list_calls(self) -> int:
        """Number of times list_registry() was called."""
        return self._list_calls
