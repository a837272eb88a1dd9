"""
Path resolution for the setting tree.

A path names a setting relative to a starting node:

    server.port          member 'port' of group 'server'
    server.ports[0]      first element of 'ports'
    a.b[2].c[0]          members and positions mixed
    [1]                  second element of the starting node itself

Resolution runs strictly left to right. Malformed paths are reported the
same way as paths that do not resolve.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..errors import SettingError, SettingNotFoundError

if TYPE_CHECKING:
    from .setting import Setting

NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
INDEX_RE = re.compile(r"\[([0-9]+)\]")


def parse_path(path: str) -> list[str | int]:
    """
    Split a path into member names (str) and positions (int).

    Raises:
        SettingNotFoundError: If the path is empty or malformed
    """
    if not isinstance(path, str) or not path:
        raise SettingNotFoundError("empty path", str(path or ""))

    parts: list[str | int] = []
    pos = 0
    first = True

    while True:
        match = NAME_RE.match(path, pos)
        if match:
            parts.append(match.group())
            pos = match.end()
        elif not (first and path.startswith("[", pos)):
            raise SettingNotFoundError(f"malformed path near position {pos}", path)

        while path.startswith("[", pos):
            match = INDEX_RE.match(path, pos)
            if not match:
                raise SettingNotFoundError(f"malformed index near position {pos}", path)
            parts.append(int(match.group(1)))
            pos = match.end()

        if pos == len(path):
            return parts

        if path[pos] != ".":
            raise SettingNotFoundError(f"unexpected {path[pos]!r} at position {pos}", path)

        pos += 1
        first = False


def resolve_path(start: Setting, path: str) -> Setting:
    """
    Walk from start along path and return the setting it names.

    Raises:
        SettingNotFoundError: As soon as a component does not resolve
    """
    current = start
    for part in parse_path(path):
        try:
            current = current[part]
        except SettingError as e:
            raise SettingNotFoundError(f"setting not found ({e.message})", _full_path(start, path)) from e
    return current


def _full_path(start: Setting, path: str) -> str:
    base = start.path
    if not base:
        return path
    if path.startswith("["):
        return f"{base}{path}"
    return f"{base}.{path}"
