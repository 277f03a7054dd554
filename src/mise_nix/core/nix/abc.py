"""Nix operations interface for building and profile bookkeeping.

This module defines the abstract interface for the external builder and the
persistent profile, following the ABC-based dependency injection pattern so
the reconciliation logic can be tested against an in-memory fake.
"""

from abc import ABC, abstractmethod

from mise_nix.core.nix.types import RegistrationResult


class Nix(ABC):
    """Abstract interface for Nix build and profile operations.

    Real implementations call the ``nix`` CLI via subprocess. Fake
    implementations are pure in-memory for unit tests without a Nix daemon.

    The profile is treated as opaque: its listing is returned as raw text and
    interpreted elsewhere.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the nix binary is installed and on PATH.

        Note:
            This is a LBYL check - call before other operations to provide
            a helpful error message if Nix isn't installed.
        """
        ...

    @abstractmethod
    def profile_exists(self) -> bool:
        """Check if the dedicated profile has been initialized.

        Returns:
            False for a fresh install where nothing was registered yet
        """
        ...

    @abstractmethod
    def build(self, reference: str) -> str:
        """Build a flake reference without linking it anywhere.

        Args:
            reference: Flake reference to build

        Returns:
            Raw builder output, one store path per line

        Raises:
            BuildFailedError: If the build exits non-zero or prints nothing
        """
        ...

    @abstractmethod
    def register(self, reference: str) -> RegistrationResult:
        """Add a flake reference to the profile.

        Never raises for Nix-level failures: an element that is already present
        yields ALREADY_PRESENT, any other failure yields FAILED with the
        diagnostic text.

        Args:
            reference: Flake reference to register
        """
        ...

    @abstractmethod
    def list_registry(self) -> str:
        """Return the profile's serialized state.

        Returns:
            Raw ``nix profile list --json`` output, or an empty string when the
            listing could not be produced
        """
        ...

    @abstractmethod
    def remove_registry_entry(self, pattern: str) -> bool:
        """Remove profile elements whose names match an anchored regex.

        Args:
            pattern: Regular expression over profile element names

        Returns:
            True on success, False if the removal command failed
        """
        ...
