"""Unit tests for instantiation strategies and their selection."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from isotest.adapters.source_reader import MemorySourceReader
from isotest.domain.errors import ResolutionError, UnsupportedModuleProtocolError
from isotest.domain.identifiers import file_identifier
from isotest.domain.modules import SourceModule, SyntheticModule
from isotest.runtime.stubs import StubFunction
from isotest.service_layer.resolver import IdentifierResolver
from isotest.service_layer.strategies import (
    AutoStubStrategy,
    BuiltinPassthroughStrategy,
    MockOverrideStrategy,
    SourceStrategy,
    StrategySelector,
    public_export_names,
)

# pylint: disable=redefined-outer-name

AddModules = Callable[..., dict[str, str]]


@pytest.fixture
def modules(add_modules: AddModules) -> dict[str, str]:
    return add_modules(
        {
            "tests/a.test.py": "from .math import add\n",
            "tests/math.py": "__all__ = ['add', 'sub']\ndef add(a, b): return a + b\ndef sub(a, b): return a - b\n",
            "tests/io.py": "def read(): return 'real'\ndef write(): pass\n",
            "tests/__mocks__/io.py": "def read(): return 'fake'\n",
            "tests/pkg/__init__.py": "from .core import run\n",
            "tests/pkg/core.py": "def run(): return 1\n",
            "tests/pkg/extra.py": "",
            "__mocks__/json.py": "def dumps(obj): return 'mocked'\n",
        }
    )


def make_selector(
    resolver: IdentifierResolver, reader: MemorySourceReader, mock_set=frozenset()
) -> StrategySelector:
    return StrategySelector(resolver, reader, mock_set, root=Path("/proj"))


@pytest.mark.asyncio
async def test_selection_table(
    resolver: IdentifierResolver, memory_reader: MemorySourceReader, modules: dict[str, str]
) -> None:
    selector = make_selector(
        resolver,
        memory_reader,
        {modules["tests/math.py"], modules["tests/io.py"], "builtin:json", "builtin:os"},
    )
    assert isinstance(await selector.select(modules["tests/a.test.py"]), SourceStrategy)
    assert isinstance(await selector.select("builtin:sys"), BuiltinPassthroughStrategy)
    assert isinstance(await selector.select(modules["tests/math.py"]), AutoStubStrategy)
    assert isinstance(await selector.select("builtin:os"), AutoStubStrategy)

    override = await selector.select(modules["tests/io.py"])
    assert isinstance(override, MockOverrideStrategy)
    assert override.override == modules["tests/__mocks__/io.py"]

    host_override = await selector.select("builtin:json")
    assert isinstance(host_override, MockOverrideStrategy)
    assert host_override.override == modules["__mocks__/json.py"]


@pytest.mark.asyncio
async def test_unknown_scheme_is_rejected(
    resolver: IdentifierResolver, memory_reader: MemorySourceReader
) -> None:
    selector = make_selector(resolver, memory_reader)
    with pytest.raises(UnsupportedModuleProtocolError):
        await selector.select("https://example.test/mod.py")


def test_override_paths(resolver: IdentifierResolver, memory_reader: MemorySourceReader) -> None:
    selector = make_selector(resolver, memory_reader)
    assert selector.override_for(file_identifier("/proj/src/db.py")) == file_identifier(
        "/proj/src/__mocks__/db.py"
    )
    assert selector.override_for("builtin:os.path") == file_identifier(
        "/proj/__mocks__/os/path.py"
    )
    rootless = StrategySelector(resolver, memory_reader)
    assert rootless.override_for("builtin:os.path") is None


@pytest.mark.asyncio
async def test_source_strategy_links_imports(
    resolver: IdentifierResolver, memory_reader: MemorySourceReader, modules: dict[str, str]
) -> None:
    node = await SourceStrategy(resolver, memory_reader).instantiate(modules["tests/a.test.py"])
    assert isinstance(node, SourceModule)
    assert dict(node.links) == {".math": modules["tests/math.py"]}
    assert node.location is None and node.origin == modules["tests/a.test.py"]


@pytest.mark.asyncio
async def test_source_strategy_links_package_submodules(
    resolver: IdentifierResolver,
    memory_reader: MemorySourceReader,
    add_modules: AddModules,
    modules: dict[str, str],
) -> None:
    ids = add_modules({"tests/b.test.py": "from .pkg import run, extra\nimport json\n"})
    node = await SourceStrategy(resolver, memory_reader).build(ids["tests/b.test.py"])
    assert dict(node.links) == {
        ".pkg": modules["tests/pkg/__init__.py"],
        ".pkg.extra": modules["tests/pkg/extra.py"],
        "json": "builtin:json",
    }


@pytest.mark.asyncio
async def test_source_strategy_skips_missing_optional_package(
    resolver: IdentifierResolver, memory_reader: MemorySourceReader, add_modules: AddModules
) -> None:
    ids = add_modules({"flat/a.py": "from . import b\n", "flat/b.py": ""})
    node = await SourceStrategy(resolver, memory_reader).build(ids["flat/a.py"])
    assert dict(node.links) == {".b": ids["flat/b.py"]}


@pytest.mark.asyncio
async def test_source_strategy_fails_on_missing_required_import(
    resolver: IdentifierResolver, memory_reader: MemorySourceReader, add_modules: AddModules
) -> None:
    ids = add_modules({"tests/c.py": "from .absent import thing\n"})
    with pytest.raises(ResolutionError):
        await SourceStrategy(resolver, memory_reader).build(ids["tests/c.py"])


@pytest.mark.asyncio
async def test_override_is_keyed_by_mocked_identifier(
    resolver: IdentifierResolver, memory_reader: MemorySourceReader, modules: dict[str, str]
) -> None:
    strategy = MockOverrideStrategy(
        modules["tests/__mocks__/io.py"], SourceStrategy(resolver, memory_reader)
    )
    node = await strategy.instantiate(modules["tests/io.py"])
    assert node.identifier == modules["tests/io.py"]
    assert node.origin == modules["tests/__mocks__/io.py"]
    assert "fake" in node.raw_text


@pytest.mark.asyncio
async def test_auto_stub_exports_exactly_the_original_names(
    memory_reader: MemorySourceReader, modules: dict[str, str]
) -> None:
    node = await AutoStubStrategy(memory_reader).instantiate(modules["tests/math.py"])
    assert isinstance(node, SyntheticModule)
    assert node.export_names == ("add", "sub")
    exports = node.producer()
    assert set(exports) == {"add", "sub"}
    assert all(isinstance(value, StubFunction) for value in exports.values())
    assert exports["add"](1, 2) is None


@pytest.mark.asyncio
async def test_auto_stub_of_host_module(memory_reader: MemorySourceReader) -> None:
    node = await AutoStubStrategy(memory_reader).instantiate("builtin:json")
    assert set(node.export_names) >= {"dumps", "loads"}
    assert all(not name.startswith("_") for name in node.export_names)


@pytest.mark.asyncio
async def test_builtin_passthrough_reexports_host_namespace() -> None:
    import json  # pylint: disable=import-outside-toplevel

    node = await BuiltinPassthroughStrategy().instantiate("builtin:json")
    exports = node.producer()
    assert exports["dumps"] is json.dumps
    assert "__file__" not in exports and "__name__" not in exports


def test_public_export_names_prefers_all() -> None:
    import types  # pylint: disable=import-outside-toplevel

    module = types.ModuleType("fake")
    module.visible, module._hidden, module.other = 1, 2, 3
    assert public_export_names(module) == ("visible", "other")
    module.__all__ = ["other", "other"]
    assert public_export_names(module) == ("other",)
