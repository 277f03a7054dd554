"""Data types for the Nix integration."""

from dataclasses import dataclass
from enum import Enum


class RegistrationStatus(Enum):
    """Outcome of registering a flake reference in the profile."""

    REGISTERED = "registered"
    ALREADY_PRESENT = "already-present"
    FAILED = "failed"


@dataclass(frozen=True)
class RegistrationResult:
    """Result from ``nix profile install``.

    Attributes:
        status: Whether the element was added, was already there, or failed
        diagnostic: Nix output for the non-REGISTERED cases (empty otherwise)
    """

    status: RegistrationStatus
    diagnostic: str = ""
