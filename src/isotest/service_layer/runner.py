"""Session runner: one test session per file, run concurrently."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from isotest.config import HarnessSettings
from isotest.domain.identifiers import file_identifier
from isotest.domain.outcomes import FileReport
from isotest.interfaces.id_generator import IdGenerator
from isotest.interfaces.reporter import AbstractReporter
from isotest.interfaces.source_reader import AbstractSourceReader

from .resolver import IdentifierResolver
from .session import TestSession

logger = logging.getLogger(__name__)


class SessionRunner:  # pylint: disable=too-many-arguments
    """Run test files with at most ``settings.max_sessions`` sessions at a time.

    All sessions share the one resolver (and therefore its cache); nothing else
    is shared between them.
    """

    def __init__(
        self,
        *,
        resolver: IdentifierResolver,
        reader: AbstractSourceReader,
        reporter: AbstractReporter,
        settings: HarnessSettings,
        id_generator: IdGenerator,
        root: Path | None = None,
    ) -> None:
        self.resolver = resolver
        self.reader = reader
        self.reporter = reporter
        self.settings = settings
        self.id_generator = id_generator
        self.root = root

    def new_session(self, path: Path) -> TestSession:
        return TestSession(
            file_identifier(path),
            resolver=self.resolver,
            reader=self.reader,
            reporter=self.reporter,
            settings=self.settings,
            session_id=self.id_generator.new_id(),
            root=self.root,
        )

    async def run_file(self, path: Path) -> FileReport:
        """Run the tests of a single file."""
        return await self.new_session(path).run()

    async def run_files(self, paths: Iterable[Path]) -> list[FileReport]:
        """Run every file and summarize.

        Returns:
            list[FileReport]: One report per file, in the order given.
        """
        semaphore = asyncio.Semaphore(self.settings.max_sessions)

        async def _bounded(path: Path) -> FileReport:
            async with semaphore:
                return await self.run_file(path)

        paths = list(paths)
        logger.debug(
            "Running %d file(s), max %d concurrent session(s)",
            len(paths),
            self.settings.max_sessions,
        )
        reports = list(await asyncio.gather(*(_bounded(p) for p in paths)))
        self.reporter.summarize(reports)
        return reports
