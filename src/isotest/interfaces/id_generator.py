"""Interface for session ID generators."""

import abc

# pylint: disable=too-few-public-methods


class IdGenerator(abc.ABC):
    """Contract for generating test-session identifiers.

    Session IDs tag every log line and report produced by one test session so
    interleaved output from concurrent sessions can be told apart.
    """

    @abc.abstractmethod
    def new_id(self) -> str:
        """Return a fresh, unique session identifier."""
