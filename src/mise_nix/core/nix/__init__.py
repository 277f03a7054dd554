from mise_nix.core.nix.abc import Nix
from mise_nix.core.nix.real import RealNix
from mise_nix.core.nix.types import RegistrationResult, RegistrationStatus

__all__ = [
    "Nix",
    "RealNix",
    "RegistrationResult",
    "RegistrationStatus",
]
