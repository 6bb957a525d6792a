"""Unit tests for identifier resolution."""

from __future__ import annotations

import asyncio
from collections import Counter
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from isotest.adapters.source_reader import MemorySourceReader
from isotest.domain.errors import ResolutionError
from isotest.domain.identifiers import file_identifier
from isotest.service_layer.resolver import (
    IdentifierResolver,
    is_valid_specifier,
    parse_specifier,
)

# pylint: disable=redefined-outer-name

PROJ = Path("/proj")
TEST_FILE = file_identifier(PROJ / "tests" / "a.test.py")


class CountingReader(MemorySourceReader):
    """Memory reader that counts existence checks."""

    def __init__(self, files=None) -> None:
        super().__init__(files)
        self.checks: Counter[str] = Counter()

    async def exists(self, identifier: str) -> bool:
        self.checks[identifier] += 1
        await asyncio.sleep(0)
        return await super().exists(identifier)


@pytest.fixture
def reader() -> CountingReader:
    return CountingReader(
        {
            PROJ / "tests" / "a.test.py": "",
            PROJ / "tests" / "math.py": "",
            PROJ / "tests" / "helpers" / "__init__.py": "",
            PROJ / "tests" / "helpers.py": "",
            PROJ / "lib" / "util.py": "",
            PROJ / "app" / "__init__.py": "",
            PROJ / "app" / "models.py": "",
        }
    )


@pytest.fixture
def resolver(reader: CountingReader) -> IdentifierResolver:
    return IdentifierResolver(
        reader, search_paths=[PROJ], host_finder=lambda name: name in {"json", "os.path"}
    )


# ============================================================================
#                               Specifier syntax
# ============================================================================


@pytest.mark.parametrize(
    ("specifier", "level", "parts"),
    [
        ("json", 0, ("json",)),
        ("pkg.mod", 0, ("pkg", "mod")),
        (".math", 1, ("math",)),
        ("..lib.util", 2, ("lib", "util")),
        (".", 1, ()),
    ],
)
def test_parse_specifier(specifier: str, level: int, parts: tuple[str, ...]) -> None:
    parsed = parse_specifier(specifier)
    assert parsed is not None
    assert (parsed.level, parsed.parts) == (level, parts)


@pytest.mark.parametrize("specifier", ["", "./math", "a..b", "1abc", ".math.", "a-b", "a b"])
def test_malformed_specifiers(specifier: str) -> None:
    assert not is_valid_specifier(specifier)


# ============================================================================
#                               Resolution
# ============================================================================


@pytest.mark.asyncio
async def test_relative_specifier_resolves_against_referrer_directory(
    resolver: IdentifierResolver,
) -> None:
    assert await resolver.resolve(".math", TEST_FILE) == file_identifier(
        PROJ / "tests" / "math.py"
    )


@pytest.mark.asyncio
async def test_package_wins_over_module_file(resolver: IdentifierResolver) -> None:
    assert await resolver.resolve(".helpers", TEST_FILE) == file_identifier(
        PROJ / "tests" / "helpers" / "__init__.py"
    )


@pytest.mark.asyncio
async def test_extra_dots_climb_directories(resolver: IdentifierResolver) -> None:
    assert await resolver.resolve("..lib.util", TEST_FILE) == file_identifier(
        PROJ / "lib" / "util.py"
    )


@pytest.mark.asyncio
async def test_bare_dot_denotes_the_package(resolver: IdentifierResolver) -> None:
    referrer = file_identifier(PROJ / "app" / "models.py")
    assert await resolver.resolve(".", referrer) == file_identifier(
        PROJ / "app" / "__init__.py"
    )


@pytest.mark.asyncio
async def test_absolute_specifier_searches_project_first(
    resolver: IdentifierResolver,
) -> None:
    assert await resolver.resolve("app.models", TEST_FILE) == file_identifier(
        PROJ / "app" / "models.py"
    )


@pytest.mark.asyncio
async def test_absolute_specifier_falls_back_to_host(resolver: IdentifierResolver) -> None:
    assert await resolver.resolve("json", TEST_FILE) == "builtin:json"
    assert await resolver.resolve("os.path", TEST_FILE) == "builtin:os.path"


@pytest.mark.asyncio
@pytest.mark.parametrize("specifier", [".missing", "nowhere", "./math", ".math."])
async def test_unresolvable_specifiers_raise(
    resolver: IdentifierResolver, specifier: str
) -> None:
    with pytest.raises(ResolutionError) as excinfo:
        await resolver.resolve(specifier, TEST_FILE)
    assert excinfo.value.specifier == specifier
    assert excinfo.value.referrer == TEST_FILE


@pytest.mark.asyncio
async def test_relative_specifier_from_host_module_raises(
    resolver: IdentifierResolver,
) -> None:
    with pytest.raises(ResolutionError, match="non-file module"):
        await resolver.resolve(".math", "builtin:json")


@pytest.mark.asyncio
async def test_default_host_finder_uses_the_running_interpreter(
    reader: CountingReader,
) -> None:
    resolver = IdentifierResolver(reader)
    assert await resolver.resolve("json", TEST_FILE) == "builtin:json"
    with pytest.raises(ResolutionError):
        await resolver.resolve("surely_not_an_installed_module_xyz", TEST_FILE)


# ============================================================================
#                               Cache
# ============================================================================


@pytest.mark.asyncio
async def test_concurrent_lookups_share_one_resolution(
    resolver: IdentifierResolver, reader: CountingReader
) -> None:
    results = await asyncio.gather(*(resolver.resolve(".math", TEST_FILE) for _ in range(10)))
    assert len(set(results)) == 1
    math = file_identifier(PROJ / "tests" / "math.py")
    assert reader.checks[math] == 1

    await resolver.resolve(".math", TEST_FILE)
    assert reader.checks[math] == 1


@pytest.mark.asyncio
async def test_failed_lookups_are_not_cached(
    resolver: IdentifierResolver, reader: CountingReader
) -> None:
    with pytest.raises(ResolutionError):
        await resolver.resolve(".late", TEST_FILE)
    reader.add(PROJ / "tests" / "late.py", "")
    assert await resolver.resolve(".late", TEST_FILE) == file_identifier(
        PROJ / "tests" / "late.py"
    )


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_shared_lookup(
    resolver: IdentifierResolver,
) -> None:
    first = asyncio.ensure_future(resolver.resolve(".math", TEST_FILE))
    second = asyncio.ensure_future(resolver.resolve(".math", TEST_FILE))
    await asyncio.sleep(0)
    first.cancel()
    assert await second == file_identifier(PROJ / "tests" / "math.py")
    assert first.cancelled()


@pytest.mark.property
@settings(max_examples=60, deadline=None)
@given(
    st.sampled_from([".math", ".helpers", "..lib.util", "app", "json", ".nope", "x.y"]),
    st.integers(min_value=1, max_value=3),
)
def test_resolution_is_idempotent(specifier: str, repeats: int) -> None:
    """Resolving the same key repeatedly always gives the same answer."""

    async def _scenario() -> list[str]:
        reader = MemorySourceReader(
            {
                PROJ / "tests" / "math.py": "",
                PROJ / "tests" / "helpers" / "__init__.py": "",
                PROJ / "lib" / "util.py": "",
                PROJ / "app" / "__init__.py": "",
            }
        )
        resolver = IdentifierResolver(
            reader, search_paths=[PROJ], host_finder=lambda name: name == "json"
        )
        outcomes = []
        for _ in range(repeats + 1):
            try:
                outcomes.append(await resolver.resolve(specifier, TEST_FILE))
            except ResolutionError as exc:
                outcomes.append(type(exc).__name__)
        return outcomes

    outcomes = asyncio.run(_scenario())
    assert len(set(outcomes)) == 1
