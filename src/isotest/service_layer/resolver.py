"""Identifier resolution.

Turns an import specifier, as written in a module, into a canonical module
identifier (see `isotest.domain.identifiers`).

Specifiers use Python import syntax: an optional run of leading dots followed
by an optional dotted name (``.math``, ``..pkg.util``, ``.``, ``json``).

- Relative specifiers resolve against the directory of the referring file; each
  dot beyond the first climbs one directory.
- Absolute specifiers are looked up in the resolver's search paths first and
  then in the host interpreter, yielding a ``builtin:`` identifier.

A dotted remainder ``a.b`` maps to ``<base>/a/b/__init__.py`` or, failing
that, ``<base>/a/b.py`` (packages win, as with the standard import system).

The resolver is shared by every test session in a process. Its cache is keyed
by ``(specifier, referrer)`` and holds in-flight lookups, so sessions racing on
the same key share one lookup. Only successful lookups are kept.
"""

from __future__ import annotations

import asyncio
import importlib.util
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from isotest.domain.errors import ResolutionError
from isotest.domain.identifiers import (
    builtin_identifier,
    file_identifier,
    is_file_identifier,
    to_path,
)
from isotest.interfaces.source_reader import AbstractSourceReader

logger = logging.getLogger(__name__)

SPECIFIER_PATTERN = re.compile(
    r"^(?P<dots>\.*)(?P<name>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)?$"
)

HostFinder = Callable[[str], bool]


@dataclass(frozen=True)
class ParsedSpecifier:
    """A syntactically valid specifier split into its parts.

    Attributes:
        level: Number of leading dots (0 for absolute specifiers).
        parts: Dotted name components; empty for a bare dot run.
    """

    level: int
    parts: tuple[str, ...]

    @property
    def relative(self) -> bool:
        return self.level > 0


def parse_specifier(specifier: str) -> ParsedSpecifier | None:
    """Split ``specifier`` into level and name parts, or return None if malformed."""
    if not specifier or (match := SPECIFIER_PATTERN.match(specifier)) is None:
        return None
    name = match["name"]
    return ParsedSpecifier(
        level=len(match["dots"]), parts=tuple(name.split(".")) if name else ()
    )


def is_valid_specifier(specifier: str) -> bool:
    """Return True if ``specifier`` is syntactically a module specifier."""
    return parse_specifier(specifier) is not None


def host_module_exists(name: str) -> bool:
    """Return True if the host interpreter can import ``name``."""
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


class IdentifierResolver:
    """Resolve import specifiers into canonical module identifiers.

    Args:
        reader: Used to check candidate module files.
        search_paths: Directories searched, in order, for absolute specifiers.
        host_finder: Predicate telling whether the host interpreter provides a
            module; defaults to `host_module_exists`.
    """

    def __init__(
        self,
        reader: AbstractSourceReader,
        search_paths: Sequence[Path] = (),
        *,
        host_finder: HostFinder = host_module_exists,
    ) -> None:
        self._reader = reader
        self._search_paths = tuple(Path(p).resolve() for p in search_paths)
        self._host_finder = host_finder
        self._resolved: dict[tuple[str, str], str] = {}
        self._pending: dict[tuple[str, str], asyncio.Task[str]] = {}

    @property
    def search_paths(self) -> tuple[Path, ...]:
        return self._search_paths

    async def resolve(self, specifier: str, referrer: str) -> str:
        """Resolve ``specifier`` as imported from the module ``referrer``.

        Args:
            specifier: The import specifier as written in source.
            referrer: Identifier of the importing module.

        Returns:
            str: The canonical identifier of the imported module.

        Raises:
            ResolutionError: If the specifier is malformed or names no module.
        """
        key = (specifier, referrer)
        if (identifier := self._resolved.get(key)) is not None:
            return identifier

        task = self._pending.get(key)
        if task is None:
            task = asyncio.create_task(self._resolve(specifier, referrer))
            self._pending[key] = task
            task.add_done_callback(lambda done: self._settle(key, done))
        # shield: a cancelled caller must not cancel a lookup other sessions share
        return await asyncio.shield(task)

    def _settle(self, key: tuple[str, str], task: asyncio.Task[str]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled() and task.exception() is None:
            self._resolved[key] = task.result()

    async def _resolve(self, specifier: str, referrer: str) -> str:
        parsed = parse_specifier(specifier)
        if parsed is None:
            raise ResolutionError(specifier, referrer, "malformed specifier")

        if parsed.relative:
            base = self._relative_base(specifier, referrer, parsed.level)
            if (found := await self._find_in(base, parsed.parts)) is not None:
                return found
            raise ResolutionError(specifier, referrer, f"no module in {base}")

        for root in self._search_paths:
            if (found := await self._find_in(root, parsed.parts)) is not None:
                return found

        if self._host_finder(specifier):
            return builtin_identifier(specifier)

        raise ResolutionError(
            specifier, referrer, "not found in search paths or host interpreter"
        )

    @staticmethod
    def _relative_base(specifier: str, referrer: str, level: int) -> Path:
        if not is_file_identifier(referrer):
            raise ResolutionError(
                specifier, referrer, "relative import from a non-file module"
            )
        base = to_path(referrer).parent
        for _ in range(level - 1):
            if base.parent == base:
                raise ResolutionError(
                    specifier, referrer, "relative import beyond filesystem root"
                )
            base = base.parent
        return base

    async def _find_in(self, base: Path, parts: tuple[str, ...]) -> str | None:
        candidates = [base.joinpath(*parts, "__init__.py")]
        if parts:
            candidates.append(base.joinpath(*parts[:-1], f"{parts[-1]}.py"))
        for candidate in candidates:
            identifier = file_identifier(candidate)
            if await self._reader.exists(identifier):
                logger.debug("Resolved %s under %s -> %s", parts, base, identifier)
                return identifier
        return None
