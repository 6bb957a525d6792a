"""Test session driver.

One `TestSession` runs the declared tests of one test file:

1. read the entry module's text;
2. scan it for ``@mock`` directives and resolve them into the mock set;
3. link the module graph reachable from the entry (strategies see the mock set);
4. evaluate the entry module in a fresh `Sandbox`;
5. run the declared tests in order, each in its own implementation scope.

Any error in steps 1-4 is a whole-file failure and is reported through
`AbstractReporter.report_fatal`. Errors inside a declared test only fail that
test.
"""

from __future__ import annotations

import logging
from pathlib import Path

from isotest.config import HarnessSettings
from isotest.domain.errors import HarnessError
from isotest.domain.identifiers import display_name
from isotest.domain.outcomes import FileReport
from isotest.interfaces.reporter import AbstractReporter
from isotest.interfaces.source_reader import AbstractSourceReader, SourceReaderError
from isotest.runtime.mocking import ImplementationTable
from isotest.runtime.sandbox import Sandbox

from .directives import scan_mock_directives
from .graph import ModuleGraphLoader
from .resolver import IdentifierResolver
from .strategies import StrategySelector

logger = logging.getLogger(__name__)


class TestSession:  # pylint: disable=too-many-instance-attributes
    """Drive one test file from raw text to reported outcomes.

    Args:
        entry: File identifier of the test file.
        resolver: Process-wide identifier resolver (shared between sessions).
        reader: Source reader.
        reporter: Receives the outcomes or the fatal error.
        settings: Harness settings (mocks directory name, per-test timeout).
        session_id: Tags log lines and the resulting report.
        root: Test root; holds the ``__mocks__`` folder for host modules.
    """

    __test__ = False  # not a pytest test class

    def __init__(  # pylint: disable=too-many-arguments
        self,
        entry: str,
        *,
        resolver: IdentifierResolver,
        reader: AbstractSourceReader,
        reporter: AbstractReporter,
        settings: HarnessSettings,
        session_id: str,
        root: Path | None = None,
    ) -> None:
        self.entry = entry
        self.session_id = session_id
        self._resolver = resolver
        self._reader = reader
        self._reporter = reporter
        self._settings = settings
        self._root = root
        self.implementations = ImplementationTable()
        self.loader: ModuleGraphLoader | None = None

    async def run(self) -> FileReport:
        """Run the session and report its result.

        Returns:
            FileReport: The outcomes, or the fatal error that aborted the file.
        """
        label = display_name(self.entry, self._root)
        logger.info("[%s] Running %s", self.session_id, label)
        sandbox: Sandbox | None = None
        try:
            text = await self._reader.read_text(self.entry)
            mock_set = await scan_mock_directives(text, self.entry, self._resolver)
            selector = StrategySelector(
                self._resolver,
                self._reader,
                mock_set,
                root=self._root,
                mocks_dirname=self._settings.mocks_dirname,
            )
            self.loader = ModuleGraphLoader(selector)
            await self.loader.load(self.entry)

            sandbox = Sandbox(self.loader.graph, implementations=self.implementations)
            sandbox.evaluate(self.entry)
            outcomes = await sandbox.run_tests(timeout=self._settings.test_timeout)
        except (HarnessError, SourceReaderError) as exc:
            logger.warning("[%s] %s failed: %s", self.session_id, label, exc)
            self._reporter.report_fatal(self.entry, exc)
            return FileReport(self.entry, self.session_id, fatal_error=exc)
        finally:
            if sandbox is not None:
                sandbox.close()
            self.implementations.clear()

        failed = sum(not outcome.passed for outcome in outcomes)
        logger.info(
            "[%s] %s: %d test(s), %d failed",
            self.session_id,
            label,
            len(outcomes),
            failed,
        )
        self._reporter.report_outcomes(self.entry, outcomes)
        return FileReport(self.entry, self.session_id, tuple(outcomes))
