"""Session ID generators for isotest."""

import itertools
import threading

from ulid import monotonic

from isotest.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Thread-safe monotonic ULID generator.

    ULIDs sort by creation time, so session IDs in a log read in the order the
    sessions were started. Uses the `ulid-py` library.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def new_id(self) -> str:
        """Generate a new ULID (serialized across threads)."""
        with self._lock:
            return str(monotonic.new())


class SimpleIdGenerator(IdGenerator):
    """Sequential IDs with a fixed prefix.

    Note:
        Deterministic; meant for tests and demos.
    """

    def __init__(self, prefix: str = "session") -> None:
        self._counter = itertools.count(1)
        self._prefix = prefix

    def new_id(self) -> str:
        """Return the next ID, e.g. ``session-0001``."""
        return f"{self._prefix}-{next(self._counter):04d}"
