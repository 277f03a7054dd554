from mise_nix.core.profile.models import ProfileElement, ProfileSnapshot
from mise_nix.core.profile.reader import ProfileReader, RegistryEntry, parse_profile_snapshot

__all__ = [
    "ProfileElement",
    "ProfileReader",
    "ProfileSnapshot",
    "RegistryEntry",
    "parse_profile_snapshot",
]
