"""Module instantiation strategies.

Every identifier requested from the module graph is instantiated by exactly
one strategy, chosen once by `StrategySelector.select`:

=========================== ================================================
Strategy                    Chosen when
=========================== ================================================
`MockOverrideStrategy`      mocked, and a ``__mocks__`` override file exists
`AutoStubStrategy`          mocked, no override
`BuiltinPassthroughStrategy` ``builtin:`` identifier, not mocked
`SourceStrategy`            ``file://`` identifier, not mocked
=========================== ================================================

Any other identifier scheme raises `UnsupportedModuleProtocolError`.

Override convention: a module at ``<dir>/<name>.py`` is overridden by
``<dir>/__mocks__/<name>.py``; a host module ``a.b`` by
``<root>/__mocks__/a/b.py``.
"""

from __future__ import annotations

import abc
import asyncio
import importlib
import importlib.util
import logging
from collections.abc import Collection
from pathlib import Path
from types import ModuleType
from typing import Any, ClassVar

from isotest.config import DEFAULT_MOCKS_DIRNAME
from isotest.domain.errors import ResolutionError, UnsupportedModuleProtocolError
from isotest.domain.identifiers import (
    builtin_name,
    display_name,
    file_identifier,
    is_builtin_identifier,
    is_file_identifier,
    to_path,
)
from isotest.domain.modules import ModuleNode, SourceModule, SyntheticModule
from isotest.interfaces.source_reader import AbstractSourceReader
from isotest.runtime.stubs import StubFunction

from .imports import ImportRequest, scan_imports, static_export_names
from .resolver import IdentifierResolver

logger = logging.getLogger(__name__)


# module attributes that describe the host module itself rather than its API
_HOST_METADATA = frozenset(
    {
        "__builtins__",
        "__cached__",
        "__file__",
        "__loader__",
        "__name__",
        "__package__",
        "__path__",
        "__spec__",
    }
)


def public_export_names(module: ModuleType) -> tuple[str, ...]:
    """Return ``__all__`` if the module declares it, else its public names."""
    declared = getattr(module, "__all__", None)
    if declared is not None:
        return tuple(dict.fromkeys(declared))
    return tuple(name for name in vars(module) if not name.startswith("_"))


def passthrough_export_names(module: ModuleType) -> tuple[str, ...]:
    """Return every name of the module's namespace except import metadata."""
    return tuple(name for name in vars(module) if name not in _HOST_METADATA)


def is_package(identifier: str) -> bool:
    """Return True if ``identifier`` names a package that can hold submodules.

    Project packages are ``__init__.py`` files; host modules are packages when
    their module spec carries submodule search locations.
    """
    if is_file_identifier(identifier):
        return identifier.endswith("/__init__.py")
    if not is_builtin_identifier(identifier):
        return False
    try:
        spec = importlib.util.find_spec(builtin_name(identifier))
    except (ImportError, ValueError):
        return False
    return spec is not None and spec.submodule_search_locations is not None


class InstantiationStrategy(abc.ABC):
    """Turns one identifier into a module node."""

    kind: ClassVar[str]

    @abc.abstractmethod
    async def instantiate(self, identifier: str) -> ModuleNode:
        """Build the node for ``identifier``."""


class SourceStrategy(InstantiationStrategy):
    """Read source text and resolve its imports into links."""

    kind = "source"

    def __init__(self, resolver: IdentifierResolver, reader: AbstractSourceReader) -> None:
        self._resolver = resolver
        self._reader = reader

    async def instantiate(self, identifier: str) -> ModuleNode:
        return await self.build(identifier)

    async def build(self, identifier: str, location: str | None = None) -> SourceModule:
        """Build a `SourceModule` keyed by ``identifier`` from text at ``location``.

        Args:
            identifier: Key of the node in the graph.
            location: File to read, when different from ``identifier``.
                Relative imports resolve against this file.
        """
        origin = location or identifier
        text = await self._reader.read_text(origin)
        requests = scan_imports(text, filename=str(to_path(origin)))
        links = await self._link(requests, origin)
        return SourceModule(identifier, text, links, location)

    async def _link(self, requests: list[ImportRequest], referrer: str) -> dict[str, str]:
        direct = [r for r in requests if r.submodule_of is None]
        links = await self._resolve_all(direct, referrer)

        # submodules only exist below packages (or a bare project directory)
        candidates = [
            r
            for r in requests
            if r.submodule_of is not None
            and (r.submodule_of not in links or is_package(links[r.submodule_of]))
        ]
        links.update(await self._resolve_all(candidates, referrer))
        return links

    async def _resolve_all(
        self, requests: list[ImportRequest], referrer: str
    ) -> dict[str, str]:
        results = await asyncio.gather(
            *(self._resolve_one(r, referrer) for r in requests)
        )
        return {
            request.specifier: identifier
            for request, identifier in zip(requests, results)
            if identifier is not None
        }

    async def _resolve_one(self, request: ImportRequest, referrer: str) -> str | None:
        try:
            return await self._resolver.resolve(request.specifier, referrer)
        except ResolutionError:
            if request.optional:
                return None
            raise


class BuiltinPassthroughStrategy(InstantiationStrategy):
    """Re-export a host module's namespace unchanged."""

    kind = "builtin"

    async def instantiate(self, identifier: str) -> ModuleNode:
        module = importlib.import_module(builtin_name(identifier))
        names = passthrough_export_names(module)

        def produce() -> dict[str, Any]:
            return {name: getattr(module, name) for name in names}

        return SyntheticModule(identifier, names, produce)


class MockOverrideStrategy(InstantiationStrategy):
    """Load the ``__mocks__`` override in place of the real module."""

    kind = "mock-override"

    def __init__(self, override: str, source: SourceStrategy) -> None:
        self.override = override
        self._source = source

    async def instantiate(self, identifier: str) -> ModuleNode:
        return await self._source.build(identifier, location=self.override)


class AutoStubStrategy(InstantiationStrategy):
    """Replace every export of the real module with a fresh `StubFunction`."""

    kind = "auto-stub"

    def __init__(self, reader: AbstractSourceReader) -> None:
        self._reader = reader

    async def instantiate(self, identifier: str) -> ModuleNode:
        names = await self._export_names(identifier)
        label = display_name(identifier)

        def produce() -> dict[str, Any]:
            return {name: StubFunction(name, label) for name in names}

        return SyntheticModule(identifier, names, produce)

    async def _export_names(self, identifier: str) -> tuple[str, ...]:
        if is_builtin_identifier(identifier):
            return public_export_names(importlib.import_module(builtin_name(identifier)))
        text = await self._reader.read_text(identifier)
        return static_export_names(text, filename=str(to_path(identifier)))


class StrategySelector:
    """Choose the instantiation strategy for each identifier of one session.

    Args:
        resolver: Shared identifier resolver.
        reader: Source reader.
        mock_set: Identifiers that must be mocked in this session.
        root: Directory holding the root ``__mocks__`` folder for host modules.
        mocks_dirname: Name of the override directory.
    """

    def __init__(
        self,
        resolver: IdentifierResolver,
        reader: AbstractSourceReader,
        mock_set: Collection[str] = frozenset(),
        *,
        root: Path | None = None,
        mocks_dirname: str = DEFAULT_MOCKS_DIRNAME,
    ) -> None:
        self._reader = reader
        self._mock_set = frozenset(mock_set)
        self._root = root
        self._mocks_dirname = mocks_dirname
        self._source = SourceStrategy(resolver, reader)
        self._builtin = BuiltinPassthroughStrategy()
        self._auto_stub = AutoStubStrategy(reader)

    @property
    def mock_set(self) -> frozenset[str]:
        return self._mock_set

    async def select(self, identifier: str) -> InstantiationStrategy:
        """Return the strategy for ``identifier``.

        Raises:
            UnsupportedModuleProtocolError: If the identifier scheme is unknown.
        """
        if not (is_file_identifier(identifier) or is_builtin_identifier(identifier)):
            raise UnsupportedModuleProtocolError(identifier)

        if identifier in self._mock_set:
            override = self.override_for(identifier)
            if override is not None and await self._reader.exists(override):
                return MockOverrideStrategy(override, self._source)
            return self._auto_stub

        if is_builtin_identifier(identifier):
            return self._builtin
        return self._source

    def override_for(self, identifier: str) -> str | None:
        """Return the identifier of the override file for ``identifier``, if any applies."""
        if is_file_identifier(identifier):
            path = to_path(identifier)
            return file_identifier(path.parent / self._mocks_dirname / path.name)
        if self._root is None:
            return None
        *packages, name = builtin_name(identifier).split(".")
        return file_identifier(
            self._root.joinpath(self._mocks_dirname, *packages, f"{name}.py")
        )
