"""Per-engine discovery and post-discovery cleanup.

This module resolves one rooted request against every registered engine,
isolating engine failures, and then filters and prunes the resulting
trees before they are handed to plan assembly or execution.
"""

import logging
from collections.abc import Iterable, Sequence
from enum import Enum

from .errors import EngineContractViolation, rethrow_if_unrecoverable
from .filters import compose_filters
from .models import ENGINE_SEGMENT_TYPE, Identifier, Node, UniqueId
from .ports import TestEnginePort
from .requests import RootedRequest

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Launcher phase a discovery is performed for."""

    DISCOVERY = "discovery"
    EXECUTION = "execution"


class ResolvedResult:
    """The engine roots produced for one rooted request.

    Mutated only by apply_post_discovery_filters() and prune() before the
    result is merged into a plan.
    """

    def __init__(self, request: RootedRequest):
        self.request = request
        self._roots: dict[TestEnginePort, Node] = {}
        suite_node = request.suite_node
        self.suite_identifier: Identifier | None = (
            Identifier.from_node(suite_node) if suite_node is not None else None
        )

    @property
    def suite_node(self) -> Node | None:
        return self.request.suite_node

    def add(self, engine: TestEnginePort, root: Node) -> None:
        """Record an engine's root, attaching it under the suite node if any."""
        if self.suite_node is not None:
            self.suite_node.add_child(root)
        self._roots[engine] = root

    @property
    def engines(self) -> list[TestEnginePort]:
        return list(self._roots)

    def root_for(self, engine: TestEnginePort) -> Node:
        return self._roots[engine]

    @property
    def roots(self) -> list[Node]:
        """Roots exposed to the plan: the suite node, or every engine root."""
        if self.suite_node is not None:
            return [self.suite_node]
        return list(self._roots.values())

    def apply_post_discovery_filters(self) -> None:
        """Detach childless non-root nodes excluded by the request's filters.

        The walk is post-order, so a container whose children were all
        detached is evaluated as childless later in the same walk.
        """
        node_filter = compose_filters(self.request.request.post_discovery_filters)
        for root in self._roots.values():
            for node in root.walk_post_order():
                if node is root or node.children:
                    continue
                result = node_filter.apply(node)
                if result.excluded:
                    logger.debug(f"Removing {node.unique_id}: {result.reason}")
                    node.remove_from_hierarchy()

    def prune(self) -> None:
        """Remove branches without tests; engine roots are kept even if empty."""
        for root in self._roots.values():
            prune_tree(root)

    def __repr__(self) -> str:
        engine_ids = [engine.engine_id for engine in self._roots]
        return f"ResolvedResult(suite={self.suite_identifier!r}, engines={engine_ids!r})"


def prune_tree(root: Node) -> None:
    """Detach every non-root node that has no children and is not a test."""
    for node in root.walk_post_order():
        if node is not root and not node.children and not node.is_test:
            node.remove_from_hierarchy()


def collect_roots(results: Iterable[ResolvedResult]) -> list[Node]:
    """Concatenate the exposed roots of results, in order."""
    return [root for result in results for root in result.roots]


class DiscoveryRunner:
    """Runs a rooted request against every eligible engine.

    Engines are invoked sequentially in registration order. An engine that
    raises is logged and left out of the result; the others still run.
    """

    def __init__(
        self,
        engines: Sequence[TestEnginePort],
        strict_engine_contracts: bool = False,
    ):
        self.engines = tuple(engines)
        self.strict_engine_contracts = strict_engine_contracts

    def resolve(self, phase: Phase, rooted: RootedRequest) -> ResolvedResult:
        result = ResolvedResult(rooted)
        request = rooted.request
        for engine in self.engines:
            excluded = any(
                engine_filter.apply(engine).excluded for engine_filter in request.engine_filters
            )
            if excluded:
                logger.debug(
                    f"Test discovery for engine '{engine.engine_id}' was skipped "
                    f"due to an engine filter in phase '{phase.value}'."
                )
                continue

            logger.debug(
                f"Discovering tests during launcher {phase.value} phase "
                f"in engine '{engine.engine_id}'."
            )
            root = self._discover_engine_root(engine, rooted)
            if root is not None:
                result.add(engine, root)

        result.apply_post_discovery_filters()
        result.prune()
        return result

    def _discover_engine_root(self, engine: TestEnginePort, rooted: RootedRequest) -> Node | None:
        unique_id = self._engine_unique_id(engine, rooted.suite_node)
        try:
            root = engine.discover(rooted.request, unique_id)
        except Exception as e:
            handle_engine_failure(engine, "discover", e)
            return None

        if root is None:
            violation = EngineContractViolation(
                engine.engine_id,
                f"The discover() method for engine with ID '{engine.engine_id}' "
                f"must return a non-None root node.",
            )
            if self.strict_engine_contracts:
                raise violation
            logger.error(str(violation))
            return None
        return root

    @staticmethod
    def _engine_unique_id(engine: TestEnginePort, suite_node: Node | None) -> UniqueId:
        if suite_node is not None:
            return suite_node.unique_id.append(ENGINE_SEGMENT_TYPE, engine.engine_id)
        return UniqueId.for_engine(engine.engine_id)


def handle_engine_failure(engine: TestEnginePort, phase: str, error: Exception) -> None:
    """Log a contained engine failure, re-raising unrecoverable ones."""
    logger.warning(
        f"Engine with ID '{engine.engine_id}' failed to {phase} tests: {error}",
        exc_info=error,
    )
    rethrow_if_unrecoverable(error)


__all__ = [
    "DiscoveryRunner",
    "Phase",
    "ResolvedResult",
    "collect_roots",
    "handle_engine_failure",
    "prune_tree",
]
