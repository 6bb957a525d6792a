"""Mock runtime.

`mock(target, table)` wraps a callable in a `MockFunction`. A mock records
every call and delegates to whatever implementation is bound to it in the
session's `ImplementationTable` *at call time*, so a mock can be configured
after it was created and handed to the code under test.

An unconfigured mock never quietly returns ``None``: calling it raises
`UnconfiguredMockError`, so a forgotten configuration fails the test instead of
letting it pass by accident.

Example (inside a sandboxed test file, where ``mock`` is pre-bound to the
session's table)::

    fetch = mock(fetch)
    fetch.return_value({"ok": True})
    assert fetch("https://example.test") == {"ok": True}
    assert fetch.calls[0].args == ("https://example.test",)
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, NamedTuple

from isotest.domain.errors import UnconfiguredMockError, UnsupportedMockTargetError

MOCK_MARKER = "__isotest_mock__"
STUB_MARKER = "__isotest_stub__"


class Call(NamedTuple):
    """Arguments of one recorded invocation."""

    args: tuple[Any, ...]
    kwargs: dict[str, Any]


def is_mock(value: object) -> bool:
    """Return True if ``value`` carries the mock identity marker."""
    return getattr(value, MOCK_MARKER, False) is True


def is_stub(value: object) -> bool:
    """Return True if ``value`` is a link-time stub (see `isotest.runtime.stubs`)."""
    return getattr(value, STUB_MARKER, False) is True


class ImplementationTable:
    """Per-session binding of mocks to the callables that implement them.

    The table is a stack of scopes. Bindings go to the innermost scope and
    lookups walk outward, so the driver can open a scope per test: whatever a
    test binds is dropped when it ends, while bindings made by module bodies
    stay visible to every test.
    """

    def __init__(self) -> None:
        self._scopes: list[dict[MockFunction, Callable[..., Any]]] = [{}]

    @property
    def depth(self) -> int:
        return len(self._scopes)

    def bind(self, mock_fn: MockFunction, implementation: Callable[..., Any]) -> None:
        """Bind ``implementation`` to ``mock_fn`` in the innermost scope."""
        self._scopes[-1][mock_fn] = implementation

    def lookup(self, mock_fn: MockFunction) -> Callable[..., Any] | None:
        """Return the innermost binding for ``mock_fn``, or None."""
        for scope in reversed(self._scopes):
            if mock_fn in scope:
                return scope[mock_fn]
        return None

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Open a nested scope for the duration of the ``with`` block."""
        self._scopes.append({})
        try:
            yield
        finally:
            self._scopes.pop()

    def clear(self) -> None:
        """Drop every binding (session teardown)."""
        self._scopes = [{}]


class MockFunction:
    """A recording stand-in for a callable.

    Attributes:
        calls: One `Call` per invocation, in call order (append-only).
    """

    __isotest_mock__ = True

    def __init__(self, target: Callable[..., Any], table: ImplementationTable) -> None:
        # keep name/doc of the target, but not its __dict__
        functools.update_wrapper(self, target, updated=())
        self._target = target
        self._table = table
        self.calls: list[Call] = []

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self.calls.append(Call(args, kwargs))
        implementation = self.bound_implementation()
        if implementation is None:
            raise UnconfiguredMockError(self._name)
        return implementation(*args, **kwargs)

    def __repr__(self) -> str:
        return f"<MockFunction {self._name} calls={len(self.calls)}>"

    @property
    def _name(self) -> str:
        return getattr(self, "__name__", type(self._target).__name__)

    def bound_implementation(self) -> Callable[..., Any] | None:
        """Return the implementation currently bound in the session table, if any."""
        return self._table.lookup(self)

    @property
    def target(self) -> Callable[..., Any]:
        """The wrapped original callable."""
        return self._target

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def called(self) -> bool:
        return bool(self.calls)

    def use_implementation(self, implementation: Callable[..., Any]) -> MockFunction:
        """Bind ``implementation``; later calls delegate to it."""
        if not callable(implementation):
            raise UnsupportedMockTargetError(implementation)
        self._table.bind(self, implementation)
        return self

    def return_value(self, value: Any) -> MockFunction:
        """Make every later call return ``value``, whatever the arguments."""
        return self.use_implementation(lambda *args, **kwargs: value)

    def throw_error(self, error: BaseException) -> MockFunction:
        """Make every later call raise ``error``."""

        def _raise(*args: Any, **kwargs: Any) -> Any:
            raise error

        return self.use_implementation(_raise)

    def reset(self) -> None:
        """Forget recorded calls. Bindings are left alone."""
        self.calls.clear()


def mock(target: Any, table: ImplementationTable) -> Any:
    """Return a mock for ``target`` bound to ``table``.

    Args:
        target: A callable, a link-time stub, or a value that is already a mock.
        table: The session's implementation table.

    Returns:
        ``target`` itself if it is already a mock; for a stub, the stub's
        handle, whose configuration the stub follows when called; otherwise
        a new `MockFunction`.

    Raises:
        UnsupportedMockTargetError: If ``target`` is not callable.
    """
    if is_mock(target):
        return target
    if is_stub(target):
        return target.mock_handle(table)
    if callable(target):
        return MockFunction(target, table)
    raise UnsupportedMockTargetError(target)
