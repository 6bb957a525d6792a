"""Configuration utilities for isotest.

This module centralizes the harness settings and the environment variables
they are read from. Command-line options take precedence over the environment
(see `HarnessSettings.with_overrides`).

Environment variables:
    - ``ISOTEST_PATTERN``: glob selecting test files (default ``**/*.test.py``).
    - ``ISOTEST_TEST_TIMEOUT``: per-test timeout in seconds (unset: no timeout).
    - ``ISOTEST_MAX_SESSIONS``: maximum number of concurrent test sessions.
    - ``ISOTEST_MOCKS_DIRNAME``: name of the override directory (``__mocks__``).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

DEFAULT_PATTERN = "**/*.test.py"  # pragma: no mutate
DEFAULT_MOCKS_DIRNAME = "__mocks__"  # pragma: no mutate
DEFAULT_MAX_SESSIONS = 8

PATTERN_ENV = "ISOTEST_PATTERN"
TEST_TIMEOUT_ENV = "ISOTEST_TEST_TIMEOUT"
MAX_SESSIONS_ENV = "ISOTEST_MAX_SESSIONS"
MOCKS_DIRNAME_ENV = "ISOTEST_MOCKS_DIRNAME"


class InvalidSettingError(Exception):
    """Raised when a setting has a value the harness cannot use."""

    def __init__(self, name: str, value: object, reason: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r} ({reason})")
        self.name = name
        self.value = value
        self.reason = reason


@dataclass(frozen=True)
class HarnessSettings:
    """Settings shared by every test session of one run.

    Attributes:
        pattern: Glob (relative to the test root) selecting test files.
        mocks_dirname: Name of the override directory next to mocked modules.
        test_timeout: Per-test timeout in seconds for async bodies; None disables it.
        max_sessions: Maximum number of test sessions running at once.
    """

    pattern: str = DEFAULT_PATTERN
    mocks_dirname: str = DEFAULT_MOCKS_DIRNAME
    test_timeout: float | None = None
    max_sessions: int = DEFAULT_MAX_SESSIONS

    def __post_init__(self) -> None:
        if not self.pattern:
            raise InvalidSettingError("pattern", self.pattern, "must not be empty")
        if not self.mocks_dirname or "/" in self.mocks_dirname:
            raise InvalidSettingError(
                "mocks_dirname", self.mocks_dirname, "must be a plain directory name"
            )
        if self.test_timeout is not None and self.test_timeout <= 0:
            raise InvalidSettingError(
                "test_timeout", self.test_timeout, "must be positive"
            )
        if self.max_sessions < 1:
            raise InvalidSettingError(
                "max_sessions", self.max_sessions, "must be at least 1"
            )

    def with_overrides(self, **overrides: object) -> HarnessSettings:
        """Return a copy with every non-None override applied."""
        changes = {name: value for name, value in overrides.items() if value is not None}
        return replace(self, **changes)


def load_settings(environ: Mapping[str, str] | None = None) -> HarnessSettings:
    """Read harness settings from the environment.

    Args:
        environ: Mapping to read from; defaults to `os.environ`.

    Returns:
        HarnessSettings: Defaults overridden by any variables that are set.

    Raises:
        InvalidSettingError: If a variable holds an unusable value.
    """
    env = os.environ if environ is None else environ
    settings = HarnessSettings()
    return settings.with_overrides(
        pattern=env.get(PATTERN_ENV) or None,
        mocks_dirname=env.get(MOCKS_DIRNAME_ENV) or None,
        test_timeout=_parse_number(env, TEST_TIMEOUT_ENV, float),
        max_sessions=_parse_number(env, MAX_SESSIONS_ENV, int),
    )


def _parse_number(env: Mapping[str, str], name: str, kind: type) -> float | int | None:
    if not (raw := env.get(name)):
        return None
    try:
        return kind(raw)
    except ValueError as exc:
        raise InvalidSettingError(name, raw, f"expected {kind.__name__}") from exc
