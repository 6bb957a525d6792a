"""Filesystem-backed source reader.

Reads module text from local files addressed by ``file://`` identifiers.
Blocking filesystem calls run in a worker thread (`asyncio.to_thread`) so that
concurrent test sessions keep making progress while one of them waits on
disk.
"""

from __future__ import annotations

import asyncio
import logging

from isotest.domain.identifiers import to_path
from isotest.interfaces.source_reader import (
    AbstractSourceReader,
    NotFoundError,
    UnreadableSourceError,
)

__all__ = ["LocalSourceReader"]

logger = logging.getLogger(__name__)


class LocalSourceReader(AbstractSourceReader):
    """Read module source text from the local filesystem.

    Args:
        encoding: Text encoding used to decode files. Defaults to UTF-8.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def read_text(self, identifier: str) -> str:
        path = to_path(identifier)
        logger.debug("Reading %s", path)
        try:
            return await asyncio.to_thread(path.read_text, encoding=self._encoding)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFoundError(identifier) from exc
        except (UnicodeDecodeError, OSError) as exc:
            raise UnreadableSourceError(identifier, f"{type(exc).__name__}: {exc}") from exc

    async def exists(self, identifier: str) -> bool:
        path = to_path(identifier)
        return await asyncio.to_thread(path.is_file)
