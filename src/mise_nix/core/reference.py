"""Flake reference parsing and comparison.

A flake reference such as ``github:NixOS/nixpkgs/1a2b3c4d#hello`` is
decomposed into a base location (``github:NixOS/nixpkgs``), an optional
revision (``1a2b3c4d``) and an optional sub-target (``hello``). Two references
denote the same artifact when their base locations agree, their sub-targets do
not conflict, and their revisions are related by prefix. Profiles record
full-length revisions while users usually type abbreviated ones, so prefix
comparison is what makes repeated installs idempotent.

All functions are pure (no I/O).
"""

import re
from dataclasses import dataclass

from mise_nix.core.errors import ReferenceParseError

# Hosted-repository schemes use owner/repo/<rev-or-ref> paths
_HOSTED_SCHEMES = ("github:", "gitlab:", "sourcehut:")

# Lock-file bookkeeping parameters that never change which artifact is built
_LOCK_ONLY_PARAMS = frozenset({"narHash", "lastModified", "revCount"})

# Prefixes that never carry a trailing revision path segment
_PATH_LIKE_PREFIXES = ("path:", "file:", "file+", "tarball+", "/", "./", "../", "~")

_FLAKE_PREFIXES = (
    "github:",
    "gitlab:",
    "sourcehut:",
    "git+",
    "hg+",
    "path:",
    "tarball+",
    "file+",
    "flake:",
    "http://",
    "https://",
)

_HEX_TOKEN = re.compile(r"[0-9a-fA-F]+")

# Attribute prefixes Nix adds when resolving an abbreviated attribute path
_IMPLICIT_ATTR_PREFIX = re.compile(r"^(?:packages|legacyPackages)\.[^.]+\.(?P<attr>.+)$")
_DEFAULT_ATTRS = re.compile(r"^(?:default|packages\.[^.]+\.default|defaultPackage\.[^.]+)$")

# Version hints that mean "whatever the reference already points at"
_PASSTHROUGH_HINTS = frozenset({"", "latest", "local"})


@dataclass(frozen=True)
class BuildReference:
    """Structured decomposition of a flake reference.

    Attributes:
        base_location: Repository or channel identity (scheme, owner, repo,
            non-revision query parameters)
        revision: Commit hash or tag, None when the reference is unpinned
        sub_target: Attribute path after ``#``, empty string when absent
    """

    base_location: str
    revision: str | None
    sub_target: str


def _split_fragment(reference: str) -> tuple[str, str]:
    """Split on the last ``#`` that is not inside a double-quoted attribute."""
    in_quotes = False
    split_at = -1
    for index, char in enumerate(reference):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "#" and not in_quotes:
            split_at = index
    if split_at == -1:
        return reference, ""
    return reference[:split_at], reference[split_at + 1 :]


def _split_query(location: str) -> tuple[str, list[tuple[str, str]]]:
    if "?" not in location:
        return location, []
    path, query = location.split("?", 1)
    params: list[tuple[str, str]] = []
    for pair in query.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params.append((key, value))
    return path, params


def _join_query(path: str, params: list[tuple[str, str]]) -> str:
    if not params:
        return path
    return path + "?" + "&".join(f"{key}={value}" for key, value in params)


def implicit_attribute(attr_path: str | None) -> str:
    """Strip the attribute prefixes Nix fills in during resolution.

    ``legacyPackages.x86_64-linux.hello`` is what ``#hello`` resolves to, and
    ``packages.x86_64-linux.default`` is what no attribute at all resolves to,
    so both sides of a comparison are reduced to the abbreviated form.

    Examples:
        >>> implicit_attribute("legacyPackages.x86_64-linux.hello")
        'hello'
        >>> implicit_attribute("packages.aarch64-darwin.default")
        ''
    """
    if not attr_path or _DEFAULT_ATTRS.match(attr_path):
        return ""
    match = _IMPLICIT_ATTR_PREFIX.match(attr_path)
    if match is None:
        return attr_path
    return match.group("attr")


def _comparable_attribute(sub_target: str) -> str:
    # An explicit default package is a concrete target, unlike a missing one
    if _DEFAULT_ATTRS.match(sub_target):
        return "default"
    return implicit_attribute(sub_target)


def is_hex_token(value: str) -> bool:
    """Return True if value consists only of hexadecimal digits."""
    return _HEX_TOKEN.fullmatch(value) is not None


def parse_reference(reference: str) -> BuildReference:
    """Decompose a flake reference into location, revision and sub-target.

    Args:
        reference: Flake reference string

    Returns:
        BuildReference for the reference

    Raises:
        ReferenceParseError: If the reference is empty, contains whitespace,
            has nothing before ``#`` or an empty attribute after it

    Examples:
        >>> parse_reference("github:NixOS/nixpkgs/abc123#hello")
        BuildReference(base_location='github:NixOS/nixpkgs', revision='abc123', sub_target='hello')
    """
    if not reference:
        raise ReferenceParseError(reference, "reference is empty")
    if any(char.isspace() for char in reference):
        raise ReferenceParseError(reference, "reference contains whitespace")

    location, sub_target = _split_fragment(reference)
    if not location:
        raise ReferenceParseError(reference, "missing flake location before '#'")
    if "#" in reference and not sub_target:
        raise ReferenceParseError(reference, "empty attribute path after '#'")

    location = location.removeprefix("flake:")
    path, params = _split_query(location)

    revision: str | None = None
    kept_params: list[tuple[str, str]] = []
    for key, value in params:
        if key == "rev":
            revision = value or None
        elif key not in _LOCK_ONLY_PARAMS:
            kept_params.append((key, value))

    if revision is None and path.startswith(_HOSTED_SCHEMES):
        scheme, _, repo_path = path.partition(":")
        parts = repo_path.split("/")
        if len(parts) >= 3 and parts[2]:
            revision = "/".join(parts[2:])
            path = f"{scheme}:{parts[0]}/{parts[1]}"
    elif (
        revision is None
        and "/" in path
        and "://" not in path
        and not path.startswith(_PATH_LIKE_PREFIXES)
    ):
        head, last = path.rsplit("/", 1)
        if head and is_hex_token(last):
            revision = last
            path = head

    return BuildReference(
        base_location=_join_query(path, kept_params),
        revision=revision,
        sub_target=sub_target,
    )


def revisions_match(left: str, right: str) -> bool:
    """Compare two revisions, tolerating abbreviated commit hashes.

    Hex-like revisions match when one is a prefix of the other. Anything else
    (tags, branch names) must be equal.
    """
    if is_hex_token(left) and is_hex_token(right):
        return left.startswith(right) or right.startswith(left)
    return left == right


def references_match(left: str, right: str) -> bool:
    """Decide whether two flake references denote the same artifact.

    Rules, first decisive rule wins:
    1. Either reference unparsable: no match
    2. Identical strings: match
    3. Different base locations: no match
    4. Both sub-targets given and different once reduced to their abbreviated
       form, with every default form read as ``default``: no match (an empty
       sub-target is unconstrained, profiles may not record it)
    5. Both revisions given: match iff they are prefix-related
    6. Otherwise no match, so unpinned references never alias each other

    Never raises.
    """
    try:
        parsed_left = parse_reference(left)
        parsed_right = parse_reference(right)
    except ReferenceParseError:
        return False

    if left == right:
        return True
    if parsed_left.base_location != parsed_right.base_location:
        return False
    left_target = _comparable_attribute(parsed_left.sub_target)
    right_target = _comparable_attribute(parsed_right.sub_target)
    if left_target and right_target and left_target != right_target:
        return False
    if parsed_left.revision is not None and parsed_right.revision is not None:
        return revisions_match(parsed_left.revision, parsed_right.revision)
    return False


def is_reference(value: str) -> bool:
    """Return True if a tool or version string is a flake reference.

    Examples:
        >>> is_reference("github:owner/repo#pkg")
        True
        >>> is_reference("nixpkgs#hello")
        True
        >>> is_reference("2.12.1")
        False
    """
    if not value:
        return False
    return "#" in value or value.startswith(_FLAKE_PREFIXES)


def apply_version_hint(reference: str, version_hint: str | None) -> str:
    """Pin a flake reference to the revision or tag given as version hint.

    - ``github:``/``gitlab:`` references: the revision path segment is
      replaced (``github:o/r/v1.0.0#pkg`` + ``v2.0.0`` → ``github:o/r/v2.0.0#pkg``)
    - ``git+`` references: ``ref=``/``rev=`` parameters are replaced by
      ``rev=<hint>``
    - Other references, and the hints ``latest``, ``local`` or empty, leave
      the reference unchanged

    Args:
        reference: Flake reference requested by the user
        version_hint: Version requested alongside the reference

    Returns:
        Flake reference to build
    """
    if version_hint is None or version_hint in _PASSTHROUGH_HINTS:
        return reference

    location, attribute = _split_fragment(reference)
    fragment = f"#{attribute}" if attribute else ""

    if location.startswith(("github:", "gitlab:")):
        path, params = _split_query(location)
        scheme, _, repo_path = path.partition(":")
        parts = repo_path.split("/")
        if len(parts) < 2:
            return reference
        kept = [(k, v) for k, v in params if k not in _LOCK_ONLY_PARAMS and k != "rev"]
        pinned = _join_query(f"{scheme}:{parts[0]}/{parts[1]}/{version_hint}", kept)
        return pinned + fragment

    if location.startswith("git+"):
        path, params = _split_query(location)
        kept = [(k, v) for k, v in params if k not in ("ref", "rev")]
        kept.append(("rev", version_hint))
        return _join_query(path, kept) + fragment

    return reference
