"""Test outcomes and per-file reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OutcomeStatus(str, Enum):
    """Result of a single declared test."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class TestOutcome:
    """Outcome of one declared test.

    Attributes:
        name: The name given to `test()`.
        status: Success or failure.
        error: The exception that failed the test, if any.
        duration: Wall-clock seconds spent in the test body.
    """

    __test__ = False  # not a pytest test class

    name: str
    status: OutcomeStatus
    error: BaseException | None = None
    duration: float = 0.0

    @classmethod
    def success(cls, name: str, duration: float = 0.0) -> TestOutcome:
        return cls(name=name, status=OutcomeStatus.SUCCESS, duration=duration)

    @classmethod
    def failure(
        cls, name: str, error: BaseException, duration: float = 0.0
    ) -> TestOutcome:
        return cls(
            name=name, status=OutcomeStatus.FAILURE, error=error, duration=duration
        )

    @property
    def passed(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


@dataclass(frozen=True)
class FileReport:
    """Everything a test session produced for one file.

    A report carries either a list of outcomes or a fatal error raised outside
    any declared test (directive, link or top-level evaluation failure).
    """

    identifier: str
    session_id: str
    outcomes: tuple[TestOutcome, ...] = field(default_factory=tuple)
    fatal_error: BaseException | None = None

    @property
    def passed(self) -> bool:
        """True if there was no fatal error and every test succeeded."""
        return self.fatal_error is None and all(o.passed for o in self.outcomes)

    @property
    def failures(self) -> tuple[TestOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.passed)
