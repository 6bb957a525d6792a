"""Fixtures for source reader contract tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from isotest.adapters.source_reader import LocalSourceReader, MemorySourceReader
from isotest.domain.identifiers import file_identifier
from isotest.interfaces.source_reader import AbstractSourceReader

SeedFiles = Callable[[dict[str, str]], dict[str, str]]


@pytest.fixture(params=["local", "memory"])
def seeded_reader(
    request: pytest.FixtureRequest, tmp_path: Path
) -> Iterator[tuple[AbstractSourceReader, SeedFiles]]:
    """Yield a fresh reader and a function seeding it with files.

    Supported params:
      - `"local"` → LocalSourceReader over ``tmp_path``
      - `"memory"` → MemorySourceReader
    """
    match request.param:
        case "local":
            reader: AbstractSourceReader = LocalSourceReader()

            def seed(files: dict[str, str]) -> dict[str, str]:
                for name, text in files.items():
                    path = tmp_path / name
                    path.parent.mkdir(parents=True, exist_ok=True)
                    path.write_text(text, encoding="utf-8")
                return {name: file_identifier(tmp_path / name) for name in files}

        case "memory":
            reader = MemorySourceReader()

            def seed(files: dict[str, str]) -> dict[str, str]:
                return {name: reader.add(tmp_path / name, text) for name, text in files.items()}

        case _:
            raise ValueError(f"unknown source reader type: {request.param}")
    yield reader, seed
