"""Source reader interface.

The harness never touches the filesystem directly: every read of module text
and every existence check made while resolving specifiers goes through an
`AbstractSourceReader`. Readers are addressed by file identifiers
(``file:///...``); see `isotest.domain.identifiers`.

Public API:
    - Exceptions: `SourceReaderError`, `NotFoundError`, `UnreadableSourceError`
    - Abstract interface: `AbstractSourceReader`

Concurrency:
    - Both methods are coroutines and may be awaited concurrently from several
      test sessions sharing one reader. Implementations must not hold state
      that makes concurrent reads interfere.
"""

import abc


class SourceReaderError(Exception):
    """Base class for all source-reader errors."""


class NotFoundError(SourceReaderError):
    """Requested identifier has no source text."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"No source found for '{identifier}'")
        self.identifier = identifier


class UnreadableSourceError(SourceReaderError):
    """Source exists but could not be read or decoded."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Cannot read source of '{identifier}': {reason}")
        self.identifier = identifier
        self.reason = reason


class AbstractSourceReader(abc.ABC):
    """Read-only access to module source text."""

    @abc.abstractmethod
    async def read_text(self, identifier: str) -> str:
        """Return the text of the module at ``identifier``.

        Args:
            identifier (str): A file identifier.

        Returns:
            str: The decoded (UTF-8) source text.

        Raises:
            NotFoundError: If no module exists at ``identifier``.
            UnreadableSourceError: If the module exists but cannot be read or
                decoded.
            UnsupportedModuleProtocolError: If ``identifier`` is not a file identifier.
        """

    @abc.abstractmethod
    async def exists(self, identifier: str) -> bool:
        """Return ``True`` if a module file exists at ``identifier``.

        Directories never count as modules.
        """
