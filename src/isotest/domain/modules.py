"""Module graph nodes.

A node is one of two immutable variants:

- `SourceModule`: backed by literal source text, evaluated in the sandbox.
  ``links`` maps every import specifier found in the text to the identifier it
  was resolved to during linking.
- `SyntheticModule`: exports are computed by ``producer`` rather than parsed;
  used for host-module passthroughs and auto-generated stubs.

Nodes compare by identity: the module graph guarantees one node per identifier
per session, and callers rely on ``is`` to observe that.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias


@dataclass(frozen=True, eq=False)
class SourceModule:
    """A module backed by source text.

    Attributes:
        identifier: Canonical identifier the node is registered under.
        raw_text: The module's source text.
        links: Import specifier -> resolved identifier.
        location: File identifier the text was read from, when it differs from
            ``identifier`` (a ``__mocks__`` override). Relative imports in the
            text resolve against this location.
    """

    identifier: str
    raw_text: str
    links: Mapping[str, str] = field(default_factory=dict)
    location: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "links", MappingProxyType(dict(self.links)))

    @property
    def origin(self) -> str:
        """Identifier of the file the text came from."""
        return self.location or self.identifier

    @property
    def dependencies(self) -> tuple[str, ...]:
        """Distinct linked identifiers, in first-seen order."""
        return tuple(dict.fromkeys(self.links.values()))


@dataclass(frozen=True, eq=False)
class SyntheticModule:
    """A module whose exports are produced programmatically.

    Attributes:
        identifier: Canonical identifier the node is registered under.
        export_names: Names the module exposes.
        producer: Called once at evaluation; returns export name -> value.
    """

    identifier: str
    export_names: tuple[str, ...]
    producer: Callable[[], Mapping[str, Any]]

    @property
    def origin(self) -> str:
        return self.identifier

    @property
    def dependencies(self) -> tuple[str, ...]:
        return ()


ModuleNode: TypeAlias = SourceModule | SyntheticModule
