"""Source reader adapters: filesystem and in-memory."""

from .local import LocalSourceReader
from .memory import MemorySourceReader

__all__ = ["LocalSourceReader", "MemorySourceReader"]
