"""Global pytest fixtures for isotest."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from textwrap import dedent

import pytest

from isotest.adapters.reporters import RecordingReporter
from isotest.adapters.source_reader import MemorySourceReader
from isotest.service_layer.resolver import IdentifierResolver

PROJECT_ROOT = Path("/proj")

# pylint: disable=redefined-outer-name


def source(text: str) -> str:
    """Dedent a triple-quoted module body."""
    return dedent(text).lstrip("\n")


@pytest.fixture
def memory_reader() -> MemorySourceReader:
    """An empty in-memory source reader (paths live under ``/proj``)."""
    return MemorySourceReader()


@pytest.fixture
def resolver(memory_reader: MemorySourceReader) -> IdentifierResolver:
    """Resolver over `memory_reader`, searching ``/proj`` for absolute imports."""
    return IdentifierResolver(memory_reader, search_paths=[PROJECT_ROOT])


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def add_modules(memory_reader: MemorySourceReader) -> Callable[[Mapping[str, str]], dict[str, str]]:
    """Add modules (path relative to ``/proj`` -> text) and return their identifiers."""

    def _add(files: Mapping[str, str]) -> dict[str, str]:
        return {
            name: memory_reader.add(PROJECT_ROOT / name, source(text))
            for name, text in files.items()
        }

    return _add


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[Mapping[str, str]], Path]:
    """Write files (path relative to ``tmp_path`` -> text) to disk; return the root."""

    def _write(files: Mapping[str, str]) -> Path:
        for name, text in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source(text), encoding="utf-8")
        return tmp_path

    return _write
