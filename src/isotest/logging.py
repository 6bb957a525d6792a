"""Logging helpers used by the isotest CLI.

Console output goes through Rich; an optional in-memory "flight recorder"
buffers DEBUG-level records and writes them to disk when something goes wrong.
Records emitted by libraries (and by ``asyncio``) are tagged with a short
prefix so they stand out from the harness's own lines.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

    from isotest.config import HarnessSettings

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "isotest"

# distributions worth naming in the startup diagnostics
REPORTED_DISTRIBUTIONS = ("click", "click-extra", "rich", "ulid-py")

# asyncio task names (LogRecord.taskName) exist from Python 3.12
RECORDER_FORMAT = (
    "[%(asctime)s] [%(process)d:%(taskName)s] %(levelname)s %(name)s:%(lineno)d: %(message)s"
    if sys.version_info >= (3, 12)
    else "[%(asctime)s] [%(process)d:%(threadName)s] %(levelname)s %(name)s:%(lineno)d: %(message)s"
)

ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]


class ThirdPartyPrefixFilter(logging.Filter):
    """Tag records from loggers outside the project with ``[top-level-name]``.

    Project records get an empty prefix. The filter never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(PROJECT_PREFIX):
            record.prefix = ""
        else:
            # "asyncio.base_events" -> "[asyncio]"
            record.prefix = f"[{record.name.split('.')[0]}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Return a Rich handler writing to stderr.

    Args:
        level: Minimum level for console output (DEBUG in ``debug_mode``).
        debug_mode: Show timestamps, logger names and source paths.
        color: Emit colors; mirrors click-extra's ``--color/--no-color``.

    Returns:
        RichHandler: Handler ready to attach to the root logger.
    """
    color_system: ColorSystem | None = "auto" if color else None
    console = Console(color_system=color_system, stderr=True)

    if debug_mode:
        level = logging.DEBUG

    handler = RichHandler(
        level=level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(prefix)s %(message)s"))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Return an in-memory flight recorder flushing to ``path``.

    Up to ``capacity`` records are buffered. The buffer is written out when a
    record at ``flush_level`` or above arrives (a fatal test file is logged at
    WARNING), or when the handler closes if ``flush_on_close`` is set.

    Args:
        path: File the buffered records are written to (truncated on open).
        capacity: Number of records kept in memory.
        flush_level: Level that triggers a flush.
        flush_on_close: Flush on close even without a triggering record.

    Returns:
        MemoryHandler: Handler whose target is a DEBUG-level `FileHandler`.
    """
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8", delay=True)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(RECORDER_FORMAT))
    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def distribution_version(name: str) -> str:
    """Return the installed version of distribution ``name``, or ``"<missing>"``."""
    try:
        return version(name)
    except PackageNotFoundError:
        return "<missing>"


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    log_path: Path | None,
    flight_recorder: bool,
    flight_capacity: int | None,
    force_flush_fr: bool,
    logger_levels: dict[str, int],
    settings: HarnessSettings | None = None,
) -> None:
    """Log a one-line banner at INFO and the run's diagnostics at DEBUG.

    Args:
        logger: Logger to emit on.
        app_version: isotest version.
        level: Effective console level.
        handlers: Handlers attached to the root logger.
        log_path: Flight-recorder file, or None.
        flight_recorder: Whether the flight recorder is on.
        flight_capacity: Flight-recorder capacity, or None when off.
        force_flush_fr: Whether the recorder flushes on close.
        logger_levels: Per-logger level overrides.
        settings: Harness settings in effect, when already known.
    """
    logger.info(
        "isotest %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        "ON" if flight_recorder else "OFF",
    )

    logger.debug("Python: %s (%s)", sys.version.split()[0], sys.executable)
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("CWD: %s", Path.cwd())
    logger.debug(
        "Libraries: %s",
        {name: distribution_version(name) for name in REPORTED_DISTRIBUTIONS},
    )
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if flight_recorder:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            str(log_path) if log_path else "<none>",
            flight_capacity,
            force_flush_fr,
        )
    if logger_levels:
        logger.debug(
            "Per-logger overrides: %s",
            {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()},
        )
    if settings is not None:
        logger.debug("Settings: %s", settings)
