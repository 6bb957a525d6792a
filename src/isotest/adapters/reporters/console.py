"""Rich console reporter.

Prints one block per test file as soon as the file finishes, then a summary
table once every file has run::

    PASS tests/math.test.py
      ✓ adds numbers (0.1 ms)
    FAIL tests/io.test.py
      ✗ reads config (0.3 ms)
        ExpectationError: Expected 1 but received 2
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from isotest.domain.identifiers import display_name
from isotest.domain.outcomes import FileReport, TestOutcome
from isotest.interfaces.reporter import AbstractReporter

__all__ = ["ConsoleReporter"]


def _format_error(error: BaseException) -> str:
    return escape(f"{type(error).__name__}: {error}")


class ConsoleReporter(AbstractReporter):
    """Report results on a Rich console.

    Args:
        root: Test root; file names are shown relative to it.
        console: Console to print on; a stdout console by default.
    """

    def __init__(self, root: Path | None = None, console: Console | None = None) -> None:
        self.root = root
        self.console = console or Console()

    def _label(self, identifier: str) -> str:
        return escape(display_name(identifier, self.root))

    def report_outcomes(self, identifier: str, outcomes: Sequence[TestOutcome]) -> None:
        passed = all(outcome.passed for outcome in outcomes)
        badge = "[bold black on green] PASS [/]" if passed else "[bold white on red] FAIL [/]"
        self.console.print(f"{badge} {self._label(identifier)}")
        if not outcomes:
            self.console.print("  [yellow]no tests declared[/yellow]")
        for outcome in outcomes:
            millis = outcome.duration * 1000
            if outcome.passed:
                self.console.print(
                    f"  [green]✓[/green] {escape(outcome.name)} [dim]({millis:.1f} ms)[/dim]"
                )
                continue
            self.console.print(
                f"  [red]✗[/red] {escape(outcome.name)} [dim]({millis:.1f} ms)[/dim]"
            )
            if outcome.error is not None:
                self.console.print(f"    [red]{_format_error(outcome.error)}[/red]")

    def report_fatal(self, identifier: str, error: BaseException) -> None:
        self.console.print(f"[bold white on red] ERROR [/] {self._label(identifier)}")
        self.console.print(f"  [red]{_format_error(error)}[/red]")
        if error.__cause__ is not None:
            self.console.print(f"    [dim]caused by {_format_error(error.__cause__)}[/dim]")

    def summarize(self, reports: Sequence[FileReport]) -> None:
        tests = sum(len(report.outcomes) for report in reports)
        failed_tests = sum(len(report.failures) for report in reports)
        fatal = sum(report.fatal_error is not None for report in reports)
        failed_files = sum(not report.passed for report in reports)

        table = Table(title="Summary", show_header=True)
        table.add_column("", style="bold")
        table.add_column("Total", justify="right")
        table.add_column("Passed", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")
        table.add_row(
            "Files", str(len(reports)), str(len(reports) - failed_files), str(failed_files)
        )
        table.add_row("Tests", str(tests), str(tests - failed_tests), str(failed_tests))
        self.console.print(table)
        if fatal:
            self.console.print(f"[red]{fatal} file(s) could not be run[/red]")
