"""Reporter interface.

A reporter receives, for every test file, either the ordered list of test
outcomes or the fatal error that aborted the file. Formatting is entirely up
to the implementation.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence

from isotest.domain.outcomes import FileReport, TestOutcome


class AbstractReporter(abc.ABC):
    """Contract for result reporting."""

    @abc.abstractmethod
    def report_outcomes(
        self, identifier: str, outcomes: Sequence[TestOutcome]
    ) -> None:
        """Report the outcomes of every declared test in one file."""

    @abc.abstractmethod
    def report_fatal(self, identifier: str, error: BaseException) -> None:
        """Report a whole-file failure raised outside any declared test."""

    def summarize(self, reports: Sequence[FileReport]) -> None:
        """Report totals once every file has run. Optional."""
