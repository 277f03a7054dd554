"""Selection of the primary output among a build's store paths.

A single build may produce several outputs (``out``, ``man``, ``dev``, ...).
The primary one is the output that ships executables, preferring the one with
the most of them.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from mise_nix.core.errors import ArtifactMissingError, NoCandidatesError
from mise_nix.core.filesystem import Filesystem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateOutput:
    """One store path from a build, annotated with its executables."""

    path: str
    has_bin: bool
    bin_count: int


def collect_candidates(filesystem: Filesystem, paths: Sequence[str]) -> list[CandidateOutput]:
    """Probe each output for a ``bin`` directory and count its entries."""
    candidates: list[CandidateOutput] = []
    for path in paths:
        bin_path = f"{path}/bin"
        has_bin = filesystem.is_directory(bin_path)
        bin_count = len(filesystem.list_directory(bin_path)) if has_bin else 0
        candidates.append(CandidateOutput(path=path, has_bin=has_bin, bin_count=bin_count))
    return candidates


def choose_output(filesystem: Filesystem, paths: Sequence[str]) -> tuple[str, bool]:
    """Choose the primary store path among a build's outputs.

    Ordering: outputs with a ``bin`` directory first, then higher executable
    count. Ties keep input order.

    Args:
        filesystem: Probe used to inspect the outputs
        paths: Store paths reported by the build

    Returns:
        Tuple of (chosen path, whether it has a bin directory)

    Raises:
        NoCandidatesError: If paths is empty
    """
    if not paths:
        raise NoCandidatesError()

    candidates = collect_candidates(filesystem, paths)
    # sorted() is stable, so equal keys keep their build order
    ranked = sorted(candidates, key=lambda c: (not c.has_bin, -c.bin_count))
    chosen = ranked[0]
    logger.debug(
        "Chose output %s (has_bin=%s, bin_count=%d) among %d",
        chosen.path,
        chosen.has_bin,
        chosen.bin_count,
        len(candidates),
    )
    return chosen.path, chosen.has_bin


def verify_artifact(filesystem: Filesystem, path: str) -> list[str]:
    """Check that a chosen store path exists and list its executables.

    Args:
        filesystem: Probe used to inspect the path
        path: Chosen store path

    Returns:
        Sorted executable names from ``<path>/bin``, empty if there are none

    Raises:
        ArtifactMissingError: If the path does not exist
    """
    if not filesystem.exists(path):
        raise ArtifactMissingError(path)
    bin_path = f"{path}/bin"
    if not filesystem.is_directory(bin_path):
        return []
    return sorted(filesystem.list_directory(bin_path))
