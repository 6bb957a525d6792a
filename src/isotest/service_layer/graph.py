"""Module graph and loader.

`ModuleGraph` is the per-session table from identifier to the task that
instantiates its node. The task is stored *before* the first await, so any
later or concurrent request for the same identifier observes the same
in-flight instantiation: one node per identifier per session, and reference
equality between everything that imports it.

Per-identifier state is derived from the task::

    Unrequested -> Resolving -> Ready
                        \\-> Failed

`ModuleGraphLoader.load` requests the entry identifier and then walks the
links of every node it reaches. An identifier already visited is not walked
again, which is what makes diamonds and cycles (A imports B imports A) safe:
linking only needs each node to exist, and evaluation later hands a cycle the
partially initialised module.

Any failure while instantiating a reachable node aborts the whole load with a
`LinkError`: sibling walks still in flight are cancelled, and nothing from a
partially linked graph is ever evaluated.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from enum import Enum

from isotest.domain.errors import LinkError
from isotest.domain.modules import ModuleNode

from .strategies import StrategySelector

logger = logging.getLogger(__name__)


class ModuleState(str, Enum):
    """Lifecycle of one identifier within a module graph."""

    UNREQUESTED = "unrequested"
    RESOLVING = "resolving"
    READY = "ready"
    FAILED = "failed"


class ModuleGraph:
    """Pending-or-ready module nodes of one test session, keyed by identifier."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[ModuleNode]] = {}

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tasks)

    def request(
        self, identifier: str, instantiate: Callable[[], Awaitable[ModuleNode]]
    ) -> asyncio.Task[ModuleNode]:
        """Return the instantiation task for ``identifier``, starting it at most once.

        Args:
            identifier: Canonical module identifier.
            instantiate: Called only on the first request; returns the
                awaitable that builds the node.
        """
        task = self._tasks.get(identifier)
        if task is None:
            task = asyncio.ensure_future(instantiate())
            self._tasks[identifier] = task
        return task

    def state(self, identifier: str) -> ModuleState:
        task = self._tasks.get(identifier)
        if task is None:
            return ModuleState.UNREQUESTED
        if not task.done():
            return ModuleState.RESOLVING
        if task.cancelled() or task.exception() is not None:
            return ModuleState.FAILED
        return ModuleState.READY

    def node(self, identifier: str) -> ModuleNode:
        """Return the node for ``identifier``.

        Raises:
            LookupError: If the identifier is not in the `READY` state.
        """
        if (state := self.state(identifier)) is not ModuleState.READY:
            raise LookupError(f"Module '{identifier}' is {state.value}, not ready")
        return self._tasks[identifier].result()

    def cancel_pending(self) -> None:
        """Cancel every instantiation still in flight."""
        for task in self._tasks.values():
            if not task.done():
                task.cancel()


class ModuleGraphLoader:
    """Resolve and instantiate the module graph reachable from an entry module.

    Args:
        selector: Picks the instantiation strategy of each identifier.
        graph: Graph to populate; a fresh one by default.
    """

    def __init__(self, selector: StrategySelector, graph: ModuleGraph | None = None) -> None:
        self._selector = selector
        self._graph = graph if graph is not None else ModuleGraph()

    @property
    def graph(self) -> ModuleGraph:
        return self._graph

    async def request(self, identifier: str) -> ModuleNode:
        """Return the node for ``identifier``, instantiating it on first request."""
        return await self._graph.request(
            identifier, lambda: self._instantiate(identifier)
        )

    async def _instantiate(self, identifier: str) -> ModuleNode:
        strategy = await self._selector.select(identifier)
        logger.debug("Instantiating %s (%s)", identifier, strategy.kind)
        return await strategy.instantiate(identifier)

    async def load(self, entry: str) -> ModuleNode:
        """Link every module reachable from ``entry`` and return the entry node.

        Raises:
            LinkError: If any reachable module fails to resolve or instantiate.
                The underlying error is chained as ``__cause__``.
        """
        visited: set[str] = set()
        try:
            await self._walk(entry, visited)
        except LinkError:
            self._graph.cancel_pending()
            raise
        logger.debug("Linked %d module(s) from %s", len(visited), entry)
        return self._graph.node(entry)

    async def _walk(self, identifier: str, visited: set[str]) -> None:
        if identifier in visited:
            return
        visited.add(identifier)
        try:
            node = await self.request(identifier)
        except Exception as exc:  # pylint: disable=broad-except
            raise LinkError(identifier, f"{type(exc).__name__}: {exc}") from exc
        walks = [
            asyncio.ensure_future(self._walk(dependency, visited))
            for dependency in node.dependencies
        ]
        try:
            await asyncio.gather(*walks)
        except BaseException:
            for walk in walks:
                if not walk.done():
                    walk.cancel()
            # cancelled walks finish unwinding before the failure propagates
            await asyncio.gather(*walks, return_exceptions=True)
            raise
