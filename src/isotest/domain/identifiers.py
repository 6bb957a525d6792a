"""Canonical module identifiers.

A module identifier is an opaque, absolute, scheme-qualified string:

- ``file:///abs/path/mod.py`` for modules read from the project tree, built
  from ``Path.resolve().as_uri()`` so every spelling of the same file yields a
  byte-identical key;
- ``builtin:<dotted.name>`` for modules taken from the host interpreter
  (standard library or installed distributions).

The module graph deduplicates on these strings, so every identifier must be
produced through the helpers below.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

from .errors import UnsupportedModuleProtocolError

FILE_SCHEME = "file://"
BUILTIN_SCHEME = "builtin:"


def file_identifier(path: str | os.PathLike[str]) -> str:
    """Return the canonical identifier for a filesystem path."""
    return Path(path).resolve().as_uri()


def builtin_identifier(name: str) -> str:
    """Return the canonical identifier for a host module name."""
    return f"{BUILTIN_SCHEME}{name}"


def is_file_identifier(identifier: str) -> bool:
    """Return True if ``identifier`` names a project file."""
    return identifier.startswith(FILE_SCHEME)


def is_builtin_identifier(identifier: str) -> bool:
    """Return True if ``identifier`` names a host interpreter module."""
    return identifier.startswith(BUILTIN_SCHEME)


def to_path(identifier: str) -> Path:
    """Convert a file identifier back into a filesystem path.

    Raises:
        UnsupportedModuleProtocolError: If ``identifier`` is not a file identifier.
    """
    if not is_file_identifier(identifier):
        raise UnsupportedModuleProtocolError(identifier)
    return Path(url2pathname(urlsplit(identifier).path))


def builtin_name(identifier: str) -> str:
    """Return the dotted module name of a builtin identifier.

    Raises:
        UnsupportedModuleProtocolError: If ``identifier`` is not a builtin identifier.
    """
    if not is_builtin_identifier(identifier):
        raise UnsupportedModuleProtocolError(identifier)
    return identifier[len(BUILTIN_SCHEME) :]


def display_name(identifier: str, root: Path | None = None) -> str:
    """Return a short human-readable label for ``identifier``.

    File identifiers are shown relative to ``root`` when they live under it.
    """
    if is_builtin_identifier(identifier):
        return builtin_name(identifier)
    if not is_file_identifier(identifier):
        return identifier
    path = to_path(identifier)
    if root is not None:
        try:
            return path.relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return str(path)
