"""Naming utilities for profile entries.

This module derives the identifiers used to track installations in the Nix
profile. All functions are pure (no I/O).

Two different names are in play:
- The entry name (``mise.<tool>.<version>``) is the sanitized key mise-nix
  uses internally for a tool@version pair.
- The registry key is the name Nix itself gives a profile element, which is
  the last component of the installed attribute path (``hello``, ``hello-1``,
  ... when the same attribute is installed more than once).

Sanitization is lossy: two distinct tools may map to the same entry name.
That collision is accepted and not guarded against.
"""

import re

from mise_nix.core.errors import ReferenceParseError
from mise_nix.core.reference import implicit_attribute, is_reference, parse_reference

_UNSAFE_TOOL_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_UNSAFE_VERSION_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

# Splits an attribute path on dots that are not inside double quotes
_ATTRIBUTE_COMPONENT = re.compile(r'"[^"]*"|[^.]+')


def sanitize_tool(tool: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``-``.

    Examples:
        >>> sanitize_tool("vscode-extensions.foo.bar")
        'vscode-extensions-foo-bar'
    """
    return _UNSAFE_TOOL_CHARS.sub("-", tool)


def sanitize_version(version: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_.-]`` with ``-``.

    Examples:
        >>> sanitize_version("3.11+debug")
        '3.11-debug'
    """
    return _UNSAFE_VERSION_CHARS.sub("-", version)


def entry_name(tool: str, version: str) -> str:
    """Derive the internal entry name for a tool@version pair.

    Args:
        tool: Tool name or flake reference
        version: Requested version

    Returns:
        ``"mise." + sanitize_tool(tool) + "." + sanitize_version(version)``

    Examples:
        >>> entry_name("hello", "2.12.1")
        'mise.hello.2.12.1'
        >>> entry_name("vscode-extensions.foo.bar", "1.0.0")
        'mise.vscode-extensions-foo-bar.1.0.0'
    """
    return f"mise.{sanitize_tool(tool)}.{sanitize_version(version)}"


def last_attribute(attribute_path: str) -> str:
    """Return the last component of an attribute path, unquoted.

    Examples:
        >>> last_attribute('plugins.x86_64-linux."com.example.plugin"')
        'com.example.plugin'
    """
    components = _ATTRIBUTE_COMPONENT.findall(attribute_path)
    if not components:
        return ""
    return components[-1].strip('"')


def registry_key(tool: str) -> str:
    """Return the name Nix gives the profile element installed for a tool.

    For a plain tool name this is the tool itself. For a flake reference it is
    the last component of the attribute path, with surrounding quotes removed.
    A reference without attribute path, or pointing at the default package,
    is named after its location (see location_name).

    Examples:
        >>> registry_key("hello")
        'hello'
        >>> registry_key("github:owner/repo/abc123#packages.x86_64-linux.tool")
        'tool'
        >>> registry_key("github:owner/repo#packages.x86_64-linux.default")
        'repo'
    """
    if not is_reference(tool):
        return tool

    location, _, attribute = tool.partition("#")
    leaf = last_attribute(implicit_attribute(attribute))
    if leaf:
        return leaf
    return location_name(location) or tool


def location_name(location: str) -> str:
    """Return the name Nix gives a default package installed from a location.

    This is the last component of the ``dir=`` parameter when one is set,
    otherwise the last component of the location path. Revisions are ignored.

    Returns:
        The derived name, empty if the location cannot be parsed

    Examples:
        >>> location_name("github:owner/repo/abc123")
        'repo'
        >>> location_name("github:owner/repo?dir=tools/fmt")
        'fmt'
    """
    try:
        base = parse_reference(location).base_location
    except ReferenceParseError:
        return ""
    path, _, query = base.partition("?")
    for pair in query.split("&"):
        key, _, value = pair.partition("=")
        if key == "dir" and value:
            path = value
    return path.rstrip("/").rsplit("/", 1)[-1].split(":")[-1]


def removal_pattern(tool: str) -> str:
    """Build an anchored regex matching a tool's profile elements.

    Matches the registry key itself and its numeric-suffix duplicates
    (``tool``, ``tool-1``, ``tool-2``, ...) and nothing else, so removing
    ``hello`` never touches ``hello2`` or ``helloworld``.

    Args:
        tool: Tool name or flake reference

    Returns:
        Regular expression string suitable for ``nix profile remove --regex``
    """
    return name_pattern(registry_key(tool), allow_numeric_suffix=True)


def name_pattern(name: str, *, allow_numeric_suffix: bool) -> str:
    """Build an anchored regex for an exact name, optionally with ``-N`` suffixes.

    Regex metacharacters in ``name`` are escaped.
    """
    suffix = r"(-\d+)?" if allow_numeric_suffix else ""
    return f"^{re.escape(name)}{suffix}$"
