"""Assertion primitive exposed to sandboxed test files as ``expect``."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class ExpectationError(AssertionError):
    """Raised when an expectation does not hold."""


class Expectation:
    """Fluent assertions about one value: ``expect(actual).to_be(expected)``."""

    def __init__(self, actual: Any) -> None:
        self.actual = actual

    def to_be(self, expected: Any) -> None:
        if self.actual != expected:
            raise ExpectationError(f"Expected {expected!r} but received {self.actual!r}")

    def to_be_identical_to(self, expected: Any) -> None:
        if self.actual is not expected:
            raise ExpectationError(
                f"Expected the same object as {expected!r} but received {self.actual!r}"
            )

    def to_be_truthy(self) -> None:
        if not self.actual:
            raise ExpectationError(f"Expected a truthy value but received {self.actual!r}")

    def to_be_falsy(self) -> None:
        if self.actual:
            raise ExpectationError(f"Expected a falsy value but received {self.actual!r}")

    def to_raise(self, expected: type[BaseException] = Exception) -> BaseException:
        """Call the actual value and expect it to raise ``expected``.

        Returns:
            The raised exception, for further checks.
        """
        if not callable(self.actual):
            raise ExpectationError(f"Expected a callable but received {self.actual!r}")
        try:
            self.actual()
        except expected as exc:
            return exc
        raise ExpectationError(f"Expected {expected.__name__} to be raised")

    def to_have_been_called(self) -> None:
        if not self._calls():
            raise ExpectationError(f"Expected {self.actual!r} to have been called")

    def to_have_been_called_with(self, *args: Any, **kwargs: Any) -> None:
        calls = self._calls()
        if not any(c.args == args and c.kwargs == kwargs for c in calls):
            recorded = [(c.args, c.kwargs) for c in calls]
            raise ExpectationError(
                f"Expected a call with {args!r} {kwargs!r}; recorded calls: {recorded!r}"
            )

    def _calls(self) -> list[Any]:
        calls = getattr(self.actual, "calls", None)
        if not isinstance(calls, list):
            raise ExpectationError(f"{self.actual!r} does not record calls")
        return calls


expect: Callable[[Any], Expectation] = Expectation
