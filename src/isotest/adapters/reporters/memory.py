"""In-memory reporter for tests."""

from __future__ import annotations

from collections.abc import Sequence

from isotest.domain.outcomes import FileReport, TestOutcome
from isotest.interfaces.reporter import AbstractReporter

__all__ = ["RecordingReporter"]


class RecordingReporter(AbstractReporter):
    """Keep everything reported, keyed by file identifier.

    Attributes:
        outcomes: identifier -> outcomes of that file.
        fatal: identifier -> fatal error of that file.
        summaries: One entry per `summarize` call.
    """

    def __init__(self) -> None:
        self.outcomes: dict[str, list[TestOutcome]] = {}
        self.fatal: dict[str, BaseException] = {}
        self.summaries: list[list[FileReport]] = []

    def report_outcomes(self, identifier: str, outcomes: Sequence[TestOutcome]) -> None:
        self.outcomes[identifier] = list(outcomes)

    def report_fatal(self, identifier: str, error: BaseException) -> None:
        self.fatal[identifier] = error

    def summarize(self, reports: Sequence[FileReport]) -> None:
        self.summaries.append(list(reports))
