"""Filesystem checks used when inspecting build outputs.

Store paths are immutable once built, so these checks are plain synchronous
reads. The ABC exists so output selection can be tested without a Nix store.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class Filesystem(ABC):
    """Abstract read-only filesystem access for dependency injection."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a path exists."""
        ...

    @abstractmethod
    def is_directory(self, path: str) -> bool:
        """Check if a path is a directory."""
        ...

    @abstractmethod
    def list_directory(self, path: str) -> list[str]:
        """List entry names in a directory.

        Returns:
            Entry names (not full paths), empty if the directory is missing
        """
        ...


class RealFilesystem(Filesystem):
    """Production implementation backed by pathlib."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def is_directory(self, path: str) -> bool:
        return Path(path).is_dir()

    def list_directory(self, path: str) -> list[str]:
        directory = Path(path)
        if not directory.is_dir():
            return []
        return [child.name for child in directory.iterdir()]
