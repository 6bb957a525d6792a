"""Link-time stubs for auto-mocked modules.

When a mocked module has no ``__mocks__`` override, every export of the real
module is replaced by a `StubFunction`. A stub is deliberately simpler than a
`MockFunction`: it records calls and returns its settable ``return_value``
(``None`` until set).

``mock(stub)`` returns the stub's `StubMock` handle. Whatever the handle is
configured with (``return_value(v)``, ``use_implementation(fn)``,
``throw_error(e)``) is bound in the session's implementation table, and the
stub itself follows that binding, so code that imported the stub sees the
configuration. Without a binding the stub falls back to ``return_value``.
"""

from __future__ import annotations

from typing import Any

from .mocking import Call, ImplementationTable, MockFunction

# pylint: disable=too-few-public-methods


class StubFunction:
    """Placeholder for one export of an auto-stubbed module.

    Attributes:
        return_value: Returned by every call without a bound implementation.
        calls: One `Call` per invocation.
    """

    __isotest_stub__ = True

    def __init__(self, name: str, module: str | None = None) -> None:
        self.__name__ = name
        self.__qualname__ = name
        self.__module__ = module
        self.return_value: Any = None
        self.calls: list[Call] = []
        self._handle: StubMock | None = None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self.calls.append(Call(args, kwargs))
        if self._handle is not None:
            implementation = self._handle.bound_implementation()
            if implementation is not None:
                return implementation(*args, **kwargs)
        return self.return_value

    def __repr__(self) -> str:
        return f"<StubFunction {self.__module__}.{self.__name__}>"

    def mock_handle(self, table: ImplementationTable) -> StubMock:
        """Return the handle configuring this stub through ``table``."""
        if self._handle is None or self._handle.table is not table:
            self._handle = StubMock(self, table)
        return self._handle


class StubMock(MockFunction):
    """`MockFunction` face of a `StubFunction`.

    Shares the stub's call record; calling the handle calls the stub.
    """

    def __init__(self, stub: StubFunction, table: ImplementationTable) -> None:
        super().__init__(stub, table)
        self.calls = stub.calls

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.target(*args, **kwargs)

    def __repr__(self) -> str:
        return f"<StubMock {self._name} calls={len(self.calls)}>"

    @property
    def table(self) -> ImplementationTable:
        return self._table
