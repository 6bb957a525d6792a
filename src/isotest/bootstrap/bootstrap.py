"""Wire the session runner with its adapters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from isotest import config
from isotest.adapters.id_generators import ULIDGenerator
from isotest.adapters.reporters import ConsoleReporter
from isotest.adapters.source_reader import LocalSourceReader
from isotest.adapters.test_finder import GlobTestFileFinder
from isotest.interfaces.id_generator import IdGenerator
from isotest.interfaces.reporter import AbstractReporter
from isotest.interfaces.source_reader import AbstractSourceReader
from isotest.interfaces.test_finder import TestFileFinder
from isotest.service_layer.resolver import IdentifierResolver
from isotest.service_layer.runner import SessionRunner


@dataclass(frozen=True)
class AppContainer:
    """A class to hold the wired application."""

    root: Path
    settings: config.HarnessSettings
    runner: SessionRunner
    finder: TestFileFinder
    reporter: AbstractReporter


def build_resolver(reader: AbstractSourceReader, root: Path) -> IdentifierResolver:
    """Build the process-wide resolver; absolute imports search the test root first."""
    return IdentifierResolver(reader, search_paths=[root])


def bootstrap(
    root: Path,
    settings: config.HarnessSettings | None = None,
    *,
    reader: AbstractSourceReader | None = None,
    reporter: AbstractReporter | None = None,
    id_generator: IdGenerator | None = None,
) -> AppContainer:
    """Assemble the harness for the test tree at ``root``.

    Args:
        root: Test root directory.
        settings: Harness settings; read from the environment when omitted.
        reader: Source reader; the local filesystem by default.
        reporter: Reporter; a Rich console reporter by default.
        id_generator: Session ID generator; monotonic ULIDs by default.

    Raises:
        InvalidSettingError: If the environment holds an invalid setting.
    """
    root = root.resolve()
    settings = settings or config.load_settings()
    reader = reader or LocalSourceReader()
    reporter = reporter or ConsoleReporter(root)

    runner = SessionRunner(
        resolver=build_resolver(reader, root),
        reader=reader,
        reporter=reporter,
        settings=settings,
        id_generator=id_generator or ULIDGenerator(),
        root=root,
    )
    return AppContainer(
        root=root,
        settings=settings,
        runner=runner,
        finder=GlobTestFileFinder(settings.pattern, settings.mocks_dirname),
        reporter=reporter,
    )
