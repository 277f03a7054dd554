"""Exception types for reference resolution and profile reconciliation.

Fatal conditions are exceptions and abort the current operation. Non-fatal
conditions (a registration that lags behind a successful build, a profile
removal that fails during uninstall) are logged as warnings by the
reconciler and never raised.
"""


class MiseNixError(Exception):
    """Base class for all mise-nix errors."""


class ReferenceParseError(MiseNixError):
    """Raised when a build reference cannot be decomposed.

    Comparison paths catch this and treat the reference as matching nothing.
    """

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(f"Invalid flake reference {reference!r}: {reason}")
        self.reference = reference
        self.reason = reason


class BuildFailedError(MiseNixError):
    """Raised when the external builder exits non-zero or prints nothing.

    Attributes:
        reference: Flake reference that was built
        diagnostic: Raw builder output, preserved verbatim for the user
    """

    def __init__(self, reference: str, diagnostic: str) -> None:
        super().__init__(f"Failed to build package: {diagnostic or 'unknown error'}")
        self.reference = reference
        self.diagnostic = diagnostic


class NoOutputsError(MiseNixError):
    """Raised when a build succeeded but reported no store paths."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"No outputs returned by nix build for: {reference}")
        self.reference = reference


class NoCandidatesError(MiseNixError):
    """Raised when output selection is asked to choose among zero paths."""

    def __init__(self) -> None:
        super().__init__("No valid output paths found from nix build.")


class ArtifactMissingError(MiseNixError):
    """Raised when a chosen store path does not exist on disk."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Built package path does not exist: {path}")
        self.path = path


class ConfigError(MiseNixError):
    """Raised when the config file is not valid TOML or has mistyped values."""

    def __init__(self, config_path: str, reason: str) -> None:
        super().__init__(f"Invalid config file {config_path}: {reason}")
        self.config_path = config_path
        self.reason = reason
