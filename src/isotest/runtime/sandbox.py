"""Execution sandbox.

A `Sandbox` evaluates the nodes of one linked `ModuleGraph` in an isolated
namespace. Each module is a fresh `types.ModuleType` whose ``__builtins__`` is
the sandbox's own copy of the builtins, extended with the test primitives:

- ``test(name, body)`` (or ``@test(name)``) declares a test;
- ``expect(actual)`` starts an assertion;
- ``mock(target)`` creates a mock bound to this session's implementation table.

The copy also replaces ``__import__``, so every ``import`` statement executed
by a sandboxed module is answered from the links recorded at link time rather
than from ``sys.modules``. Project modules are therefore instantiated once per
sandbox and never leak into the host interpreter.

Module instances are registered before their body runs. A module imported
while its own body is still executing (an import cycle) is handed out
partially initialised, as with the standard import system.
"""

from __future__ import annotations

import asyncio
import builtins
import functools
import inspect
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from isotest.domain.errors import HarnessError, ModuleEvaluationError, TestTimeoutError
from isotest.domain.identifiers import display_name, to_path
from isotest.domain.modules import ModuleNode, SourceModule, SyntheticModule
from isotest.domain.outcomes import TestOutcome

from .expect import expect
from .mocking import ImplementationTable, mock

logger = logging.getLogger(__name__)

IDENTIFIER_KEY = "__isotest_identifier__"


class NodeSource:  # pylint: disable=too-few-public-methods
    """Anything that hands out ready module nodes by identifier (a `ModuleGraph`)."""

    def node(self, identifier: str) -> ModuleNode:  # pragma: no cover - protocol
        raise NotImplementedError


@dataclass(frozen=True)
class TestDeclaration:
    """A test registered by sandboxed code."""

    __test__ = False  # not a pytest test class

    name: str
    body: Callable[[], Any]


class Sandbox:
    """Isolated global namespace for one test session.

    Args:
        graph: The linked module graph to evaluate from.
        implementations: The session's implementation table; a fresh one by default.
        extra_globals: Additional names made visible to every sandboxed module.
    """

    def __init__(
        self,
        graph: NodeSource,
        *,
        implementations: ImplementationTable | None = None,
        extra_globals: Mapping[str, Any] | None = None,
    ) -> None:
        self.graph = graph
        self.implementations = implementations or ImplementationTable()
        self.declarations: list[TestDeclaration] = []
        self._instances: dict[str, ModuleType] = {}
        self.builtins = self._make_builtins(extra_globals or {})

    def _make_builtins(self, extra_globals: Mapping[str, Any]) -> dict[str, Any]:
        namespace = dict(vars(builtins))
        namespace.update(
            __import__=self._import,
            test=self.test,
            expect=expect,
            mock=functools.partial(mock, table=self.implementations),
        )
        namespace.update(extra_globals)
        return namespace

    # ---- test declaration ----

    def test(self, name: str, body: Callable[[], Any] | None = None) -> Any:
        """Declare a test. Usable as ``test(name, fn)`` or as ``@test(name)``."""
        if body is None:
            return functools.partial(self.test, name)
        if not callable(body):
            raise TypeError(f"test body for {name!r} must be callable")
        self.declarations.append(TestDeclaration(name, body))
        return body

    # ---- evaluation ----

    def evaluate(self, identifier: str) -> ModuleType:
        """Evaluate the module ``identifier`` once and return its instance.

        Raises:
            ModuleEvaluationError: If a module body raises a non-harness error.
            HarnessError: Harness errors raised by module bodies propagate as-is.
        """
        if (module := self._instances.get(identifier)) is not None:
            return module
        node = self.graph.node(identifier)
        module = ModuleType(_module_name(node))
        self._instances[identifier] = module
        if isinstance(node, SyntheticModule):
            self._evaluate_synthetic(node, module)
        else:
            self._evaluate_source(node, module)
        return module

    def is_evaluated(self, identifier: str) -> bool:
        return identifier in self._instances

    def _evaluate_source(self, node: SourceModule, module: ModuleType) -> None:
        filename = str(to_path(node.origin))
        module.__dict__.update(
            {"__builtins__": self.builtins, "__file__": filename, IDENTIFIER_KEY: node.identifier}
        )
        logger.debug("Evaluating %s", filename)
        code = compile(node.raw_text, filename, "exec", dont_inherit=True)
        try:
            exec(code, module.__dict__)  # pylint: disable=exec-used
        except HarnessError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            raise ModuleEvaluationError(
                node.identifier, f"{type(exc).__name__}: {exc}"
            ) from exc

    @staticmethod
    def _evaluate_synthetic(node: SyntheticModule, module: ModuleType) -> None:
        exports = node.producer()
        for name in node.export_names:
            setattr(module, name, exports[name])
        setattr(module, IDENTIFIER_KEY, node.identifier)

    # ---- import hook ----

    def _import(
        self,
        name: str,
        globals: Mapping[str, Any] | None = None,  # pylint: disable=redefined-builtin
        locals: Mapping[str, Any] | None = None,  # pylint: disable=redefined-builtin
        fromlist: Sequence[str] | None = (),
        level: int = 0,
    ) -> ModuleType:
        referrer = (globals or {}).get(IDENTIFIER_KEY)
        if referrer is None:
            # not a sandboxed module (e.g. host code running inside a test body)
            return builtins.__import__(name, globals, locals, fromlist or (), level)
        links = self.graph.node(referrer).links

        if not fromlist:
            # "import a.b.c" binds "a" after importing every prefix
            parts = name.split(".")
            modules = [
                self._linked(links, ".".join(parts[:i]), referrer)
                for i in range(1, len(parts) + 1)
            ]
            for parent, child, attr in zip(modules, modules[1:], parts[1:]):
                setattr(parent, attr, child)
            return modules[0]

        specifier = "." * level + name
        if name or specifier in links:
            base = self._linked(links, specifier, referrer)
        else:
            # "from . import x" in a directory without __init__.py
            base = ModuleType(specifier)
        prefix = f"{specifier}." if name else specifier
        for item in fromlist:
            submodule = links.get(prefix + item)
            if item != "*" and submodule is not None and not hasattr(base, item):
                setattr(base, item, self.evaluate(submodule))
        return base

    def _linked(self, links: Mapping[str, str], specifier: str, referrer: str) -> ModuleType:
        identifier = links.get(specifier)
        if identifier is None:
            raise ModuleNotFoundError(
                f"No module named {specifier!r} was linked for {display_name(referrer)}",
                name=specifier,
            )
        return self.evaluate(identifier)

    # ---- running tests ----

    async def run_tests(self, *, timeout: float | None = None) -> list[TestOutcome]:
        """Run every declared test in declaration order.

        Each test runs inside its own implementation scope; a failing test is
        recorded and never stops the others.

        Args:
            timeout: Per-test limit in seconds for ``async`` bodies, or None.
        """
        outcomes = []
        for declaration in self.declarations:
            outcomes.append(await self._run_one(declaration, timeout))
        return outcomes

    async def _run_one(
        self, declaration: TestDeclaration, timeout: float | None
    ) -> TestOutcome:
        started = time.perf_counter()
        with self.implementations.scope():
            try:
                result = declaration.body()
                if inspect.isawaitable(result):
                    await _await_with_timeout(declaration.name, result, timeout)
            except Exception as exc:  # pylint: disable=broad-except
                logger.debug("Test %r failed: %r", declaration.name, exc)
                return TestOutcome.failure(
                    declaration.name, exc, time.perf_counter() - started
                )
        return TestOutcome.success(declaration.name, time.perf_counter() - started)

    def close(self) -> None:
        """Release the session's mock memory and module instances."""
        self.implementations.clear()
        self._instances.clear()


async def _await_with_timeout(name: str, awaitable: Any, timeout: float | None) -> None:
    if timeout is None:
        await awaitable
        return
    try:
        await asyncio.wait_for(awaitable, timeout)
    except TimeoutError as exc:
        raise TestTimeoutError(name, timeout) from exc


def _module_name(node: ModuleNode) -> str:
    label = display_name(node.origin)
    stem = label.rsplit("/", 1)[-1].removesuffix(".py")
    if stem == "__init__":
        stem = label.rsplit("/", 2)[-2] if label.count("/") else stem
    return stem
