"""isotest ``run`` and ``list`` commands.

Both commands discover test files below ROOT (default: the current
directory) with the configured glob. ``run`` then executes one isolated test
session per file and exits with status 1 if any file had a failing test or
could not be run at all.

Settings come from the environment (``ISOTEST_*``, see `isotest.config`);
the options below override them.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from isotest import config
from isotest.bootstrap import AppContainer, bootstrap

from .helpers import error, success, warn

logger = logging.getLogger(__name__)

root_argument = click.argument(
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
)
pattern_option = click.option(
    "--pattern",
    "-p",
    help=f"Glob selecting test files below ROOT [default: {config.DEFAULT_PATTERN}].",
    envvar=config.PATTERN_ENV,
    show_envvar=True,
)


def _container(root: Path, **overrides: object) -> AppContainer:
    try:
        settings = config.load_settings().with_overrides(**overrides)
    except config.InvalidSettingError as exc:
        raise click.ClickException(str(exc)) from exc
    return bootstrap(root, settings)


@click.command()
@root_argument
@pattern_option
@click.option(
    "--timeout",
    "-t",
    "test_timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="Per-test timeout in seconds for async test bodies.",
    envvar=config.TEST_TIMEOUT_ENV,
    show_envvar=True,
)
@click.option(
    "--max-sessions",
    "-j",
    type=click.IntRange(min=1),
    help=f"Maximum number of files run at once [default: {config.DEFAULT_MAX_SESSIONS}].",
    envvar=config.MAX_SESSIONS_ENV,
    show_envvar=True,
)
def run(
    root: Path, pattern: str | None, test_timeout: float | None, max_sessions: int | None
) -> None:
    """Run the tests of every test file below ROOT."""
    app = _container(
        root, pattern=pattern, test_timeout=test_timeout, max_sessions=max_sessions
    )
    paths = app.finder.find(app.root)
    if not paths:
        warn(f"No test files matching {app.settings.pattern!r} under {app.root}")
        return

    reports = asyncio.run(app.runner.run_files(paths))
    failed = [report for report in reports if not report.passed]
    if failed:
        error(f"{len(failed)} of {len(reports)} file(s) failed")
        raise click.exceptions.Exit(1)
    success(f"All {len(reports)} file(s) passed")


@click.command()
@root_argument
@pattern_option
def list_files(root: Path, pattern: str | None) -> None:
    """List the test files below ROOT, one per line."""
    app = _container(root, pattern=pattern)
    paths = app.finder.find(app.root)
    for path in paths:
        click.echo(path.relative_to(app.root).as_posix())
    logger.info("Found %d test file(s) under %s", len(paths), app.root)
