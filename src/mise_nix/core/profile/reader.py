"""Read access to the mise-nix Nix profile.

Projects the profile listing onto RegistryEntry records and answers the two
questions reconciliation needs: is an artifact for this reference already
registered, and does an element with this name exist.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from mise_nix.core.naming import last_attribute, location_name, name_pattern
from mise_nix.core.nix.abc import Nix
from mise_nix.core.profile.models import ProfileElement, ProfileSnapshot
from mise_nix.core.reference import implicit_attribute, references_match

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class RegistryEntry:
    """One element of the profile, as seen by reconciliation.

    Attributes:
        entry_name: Element name, unique within the current profile state
        source_reference: Reference built from the URL the user installed
        locked_reference: Reference built from the locked URL, when recorded
        artifact_paths: Store paths of the element, in profile order
    """

    entry_name: str
    source_reference: str
    locked_reference: str | None
    artifact_paths: tuple[str, ...]

    def references(self) -> list[str]:
        """Recorded references to compare against, original URL first."""
        refs = [self.source_reference]
        if self.locked_reference is not None and self.locked_reference != self.source_reference:
            refs.append(self.locked_reference)
        return refs


def parse_profile_snapshot(raw: str) -> ProfileSnapshot:
    """Parse a profile listing, degrading to an empty snapshot.

    Args:
        raw: Output of ``nix profile list --json``

    Returns:
        Parsed snapshot, empty if raw is blank, not JSON, or not shaped like a
        profile listing
    """
    if not raw.strip():
        return ProfileSnapshot.empty()
    try:
        return ProfileSnapshot.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("Ignoring unreadable profile listing: %s", e.errors()[0]["msg"])
        return ProfileSnapshot.empty()


def _reference(url: str, attribute: str) -> str:
    location = url.removeprefix("flake:")
    return f"{location}#{attribute}" if attribute else location


def _element_name(name: str | None, element: ProfileElement, index: int) -> str:
    if name is not None:
        return name
    # List-form listings have no names; Nix derives them from the attribute,
    # or from the flake location for default packages
    leaf = last_attribute(implicit_attribute(element.attr_path))
    if leaf:
        return leaf
    source_url = element.original_url or element.url
    return (location_name(source_url) if source_url else "") or str(index)


def _to_entry(name: str | None, raw_element: Any, index: int) -> RegistryEntry | None:
    try:
        element = ProfileElement.model_validate(raw_element)
    except ValidationError:
        logger.debug("Skipping malformed profile element %s", name if name is not None else index)
        return None

    if not element.store_paths:
        return None
    source_url = element.original_url or element.url
    if source_url is None:
        return None

    # Default packages keep an explicit target so they only match default requests
    attribute = implicit_attribute(element.attr_path) or ("default" if element.attr_path else "")
    locked = _reference(element.url, attribute) if element.url else None
    return RegistryEntry(
        entry_name=_element_name(name, element, index),
        source_reference=_reference(source_url, attribute),
        locked_reference=locked,
        artifact_paths=tuple(element.store_paths),
    )


class ProfileReader:
    """Query interface over the profile owned by a Nix integration.

    Listings are taken fresh on every call; nothing is cached across profile
    mutations.
    """

    def __init__(self, nix: Nix) -> None:
        self._nix = nix

    def list_entries(self) -> Iterator[RegistryEntry]:
        """Lazily yield the profile's entries in Nix's enumeration order.

        An uninitialized profile yields nothing. The iterator reflects the
        profile at the moment iteration starts; list again after any write.
        """
        if not self._nix.profile_exists():
            return
        snapshot = parse_profile_snapshot(self._nix.list_registry())
        for index, (name, raw_element) in enumerate(snapshot.raw_elements()):
            entry = _to_entry(name, raw_element, index)
            if entry is not None:
                yield entry

    def find_by_reference(self, reference: str) -> tuple[str, ...] | None:
        """Return the artifact paths of the first entry matching a reference.

        Each entry is compared through its original URL, then its locked URL.
        With several matches the first in enumeration order wins.

        Returns:
            Store paths of the matching entry, or None if nothing matches
        """
        for entry in self.list_entries():
            for recorded in entry.references():
                if references_match(reference, recorded):
                    logger.debug(
                        "Reference %s matches profile entry %s", reference, entry.entry_name
                    )
                    return entry.artifact_paths
        return None

    def find_by_entry_name(self, name: str, *, allow_numeric_suffix: bool = False) -> bool:
        """Check whether an element with the given name exists.

        Args:
            name: Exact element name
            allow_numeric_suffix: Also accept ``name-1``, ``name-2``, ...
        """
        pattern = re.compile(name_pattern(name, allow_numeric_suffix=allow_numeric_suffix))
        return any(pattern.fullmatch(entry.entry_name) for entry in self.list_entries())
