"""JSON output utilities for CLI commands with machine-parseable output."""

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mise_nix.cli.output import machine_output


class InstallResponse(BaseModel):
    """JSON shape of ``mise-nix install --json``.

    Attributes:
        reference: Flake reference that was resolved (after pinning)
        store_path: Primary output chosen among the build outputs
        has_bin: Whether the primary output has a bin directory
        outputs: All store paths of the artifact
        binaries: Executable names in the primary output
    """

    model_config = ConfigDict(frozen=True)

    reference: str
    store_path: str
    has_bin: bool
    outputs: list[str] = Field(min_length=1)
    binaries: list[str]


class ProfileEntryResponse(BaseModel):
    """JSON shape of one element in ``mise-nix list --json``."""

    model_config = ConfigDict(frozen=True)

    name: str
    reference: str
    locked_reference: str | None
    store_paths: list[str]


def _serialize_for_json(obj: Any) -> Any:
    """Recursively serialize special types for JSON.

    Handles Path and dataclass instances that appear in plain dict structures
    (not Pydantic models).
    """
    if isinstance(obj, Path):
        return str(obj)
    if is_dataclass(obj) and not isinstance(obj, type):
        return _serialize_for_json(asdict(obj))
    if isinstance(obj, dict):
        return {key: _serialize_for_json(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize_for_json(item) for item in obj]
    return obj


def emit_json(data: dict[str, Any] | list[Any]) -> None:
    """Output JSON data to stdout for machine consumption.

    For Pydantic models, call model.model_dump(mode='json') before
    passing to this function.
    """
    machine_output(json.dumps(_serialize_for_json(data), indent=2))
