"""In-memory source reader.

Keeps module text in a dict keyed by file identifier. Meant for **tests** and
examples: it never touches the disk, and it counts reads per identifier so
tests can assert which modules were (or were not) loaded.

Typical usage
-------------
    reader = MemorySourceReader({"/proj/math.py": "def add(a, b): return a + b"})
    text = await reader.read_text(file_identifier("/proj/math.py"))
"""

from __future__ import annotations

import asyncio
import os
from collections import Counter
from collections.abc import Mapping

from isotest.domain.identifiers import file_identifier, to_path
from isotest.interfaces.source_reader import AbstractSourceReader, NotFoundError

__all__ = ["MemorySourceReader"]

PathLike = str | os.PathLike[str]


class MemorySourceReader(AbstractSourceReader):
    """Source reader backed by a dict of path -> text.

    Args:
        files: Initial contents, keyed by filesystem path.

    Attributes:
        reads: Number of `read_text` calls per identifier.
    """

    def __init__(self, files: Mapping[PathLike, str] | None = None) -> None:
        self._files: dict[str, str] = {}
        self.reads: Counter[str] = Counter()
        for path, text in (files or {}).items():
            self.add(path, text)

    def add(self, path: PathLike, text: str) -> str:
        """Add (or replace) a module and return its identifier."""
        identifier = file_identifier(path)
        self._files[identifier] = text
        return identifier

    async def read_text(self, identifier: str) -> str:
        to_path(identifier)  # rejects non-file identifiers
        self.reads[identifier] += 1
        await asyncio.sleep(0)  # yield like a real read would
        try:
            return self._files[identifier]
        except KeyError as exc:
            raise NotFoundError(identifier) from exc

    async def exists(self, identifier: str) -> bool:
        return identifier in self._files
