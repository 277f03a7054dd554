"""Configuration data structures and loading.

Provides immutable configuration built once at CLI entry point from the
process environment (and an optional TOML file), then threaded through
MiseNixContext. Nothing else in the package reads the environment.
"""

import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from mise_nix.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_NIXPKGS_REPO_URL = "https://github.com/NixOS/nixpkgs"

_TRUTHY_NATIVE = ("1", "true")


@dataclass(frozen=True)
class MiseNixConfig:
    """Immutable mise-nix configuration.

    Loaded once at CLI entry point and stored in MiseNixContext.
    All fields are read-only after construction.

    Attributes:
        profile_path: Dedicated Nix profile that records mise-nix installs
        nixpkgs_repo_url: Repository used for nixpkgs flake references
        allow_unfree: MISE_NIX_ALLOW_UNFREE=true was set
        allow_insecure: MISE_NIX_ALLOW_INSECURE=true was set
        native_unfree: NIXPKGS_ALLOW_UNFREE is already set to 1/true
        native_insecure: NIXPKGS_ALLOW_INSECURE is already set to 1/true
    """

    profile_path: Path
    nixpkgs_repo_url: str
    allow_unfree: bool
    allow_insecure: bool
    native_unfree: bool
    native_insecure: bool

    @property
    def impure(self) -> bool:
        """Whether Nix must evaluate with --impure to see the NIXPKGS_* variables."""
        return any(
            (self.allow_unfree, self.allow_insecure, self.native_unfree, self.native_insecure)
        )

    def build_env(self) -> dict[str, str]:
        """Extra environment variables for Nix invocations.

        MISE_NIX_ALLOW_* escape hatches are translated into the native NIXPKGS_*
        variables unless those are already set.
        """
        env: dict[str, str] = {}
        if self.allow_unfree and not self.native_unfree:
            env["NIXPKGS_ALLOW_UNFREE"] = "1"
        if self.allow_insecure and not self.native_insecure:
            env["NIXPKGS_ALLOW_INSECURE"] = "1"
        return env

    @property
    def nixpkgs_flake_base(self) -> str:
        """nixpkgs repository URL in flake syntax (``github:NixOS/nixpkgs``)."""
        return self.nixpkgs_repo_url.replace("https://github.com/", "github:").rstrip("/")


def default_profile_path(environ: Mapping[str, str]) -> Path:
    """Return ``$XDG_STATE_HOME/mise-nix/profile`` or its ``~/.local/state`` fallback."""
    state_home = environ.get("XDG_STATE_HOME")
    if state_home:
        return Path(state_home) / "mise-nix" / "profile"
    home = environ.get("HOME")
    base = Path(home) if home else Path.home()
    return base / ".local" / "state" / "mise-nix" / "profile"


def config_file_path(environ: Mapping[str, str]) -> Path:
    """Return ``$XDG_CONFIG_HOME/mise-nix/config.toml`` or its ``~/.config`` fallback."""
    config_home = environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "mise-nix" / "config.toml"
    home = environ.get("HOME")
    base = Path(home) if home else Path.home()
    return base / ".config" / "mise-nix" / "config.toml"


def _load_file_settings(config_path: Path) -> dict[str, object]:
    if not config_path.exists():
        return {}
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(str(config_path), str(e)) from e
    logger.debug("Loaded config file: %s", config_path)
    return data


def load_config(environ: Mapping[str, str]) -> MiseNixConfig:
    """Build configuration from an environment mapping.

    Precedence: environment variables, then the TOML config file, then
    defaults.

    Args:
        environ: Environment mapping (os.environ at the CLI entry point)

    Returns:
        MiseNixConfig instance

    Raises:
        ConfigError: If the config file is malformed or a value has the wrong type
    """
    file_settings = _load_file_settings(config_file_path(environ))

    profile_setting = environ.get("MISE_NIX_PROFILE") or file_settings.get("profile_path")
    if profile_setting is not None and not isinstance(profile_setting, str):
        raise ConfigError(str(config_file_path(environ)), "'profile_path' must be a string")
    profile_path = (
        Path(profile_setting).expanduser() if profile_setting else default_profile_path(environ)
    )

    repo_setting = environ.get("MISE_NIX_NIXPKGS_REPO_URL") or file_settings.get(
        "nixpkgs_repo_url"
    )
    if repo_setting is not None and not isinstance(repo_setting, str):
        raise ConfigError(
            str(config_file_path(environ)), "'nixpkgs_repo_url' must be a string"
        )

    return MiseNixConfig(
        profile_path=profile_path,
        nixpkgs_repo_url=repo_setting or DEFAULT_NIXPKGS_REPO_URL,
        allow_unfree=environ.get("MISE_NIX_ALLOW_UNFREE") == "true",
        allow_insecure=environ.get("MISE_NIX_ALLOW_INSECURE") == "true",
        native_unfree=environ.get("NIXPKGS_ALLOW_UNFREE") in _TRUTHY_NATIVE,
        native_insecure=environ.get("NIXPKGS_ALLOW_INSECURE") in _TRUTHY_NATIVE,
    )
