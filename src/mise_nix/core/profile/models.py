"""Pydantic models for ``nix profile list --json`` output.

The listing format is owned by Nix and changes between releases: version 2
stores elements in a list, version 3 in a mapping keyed by element name.
Every field is optional and unknown fields are kept (extra="allow") so a newer
Nix never breaks parsing.
"""

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProfileElement(BaseModel):
    """One installed element of a Nix profile."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    active: bool = True
    attr_path: str | None = Field(default=None, alias="attrPath")
    original_url: str | None = Field(default=None, alias="originalUrl")
    url: str | None = None
    outputs: list[str] | None = None
    priority: int | None = None
    store_paths: list[str] = Field(default_factory=list, alias="storePaths")


class ProfileSnapshot(BaseModel):
    """Top-level structure of a profile listing.

    Elements are left untyped here and validated one by one, so a single
    malformed element does not hide the rest of the profile.
    """

    model_config = ConfigDict(extra="allow")

    version: int | None = None
    elements: dict[str, Any] | list[Any] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "ProfileSnapshot":
        """Snapshot of a profile with no elements."""
        return cls()

    def raw_elements(self) -> Iterator[tuple[str | None, Any]]:
        """Yield (name, raw element) pairs in the listing's native order.

        List-form listings (version 2) carry no names; None is yielded instead.
        """
        if isinstance(self.elements, dict):
            yield from self.elements.items()
            return
        for element in self.elements:
            yield None, element
