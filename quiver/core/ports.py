"""Port interfaces for the Quiver launcher core.

These abstract base classes define the boundaries between the launcher
core and externally supplied plugins. Implementations live in the
adapters/ package or in third-party engine distributions.

Port Interface Categories:

1. **Driven Ports** (core calls out to plugins)
   - TestEnginePort: Discover and execute a tree of nodes
   - SuiteResolverPort: Find the suites reachable from a selector

2. **Listener Ports** (core and engines report lifecycle events)
   - EngineExecutionListener: Node-level events emitted by an engine
   - ExecutionListener: Plan-level events observed by the embedding application
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .filters import Filter
from .models import ExecutionResult, Identifier, Node, ReportEntry, UniqueId
from .requests import DiscoveryRequest, DiscoverySelector, ExecutionRequest

if TYPE_CHECKING:
    from .plan import TestPlan


# ============================================================================
# DRIVEN PORTS (Core calls out to plugins)
# ============================================================================


class TestEnginePort(ABC):
    """Port for a pluggable discovery and execution back-end.

    Engines are identified by a stable engine_id that must be unique
    among the engines handed to one launcher. The launcher calls engines
    strictly sequentially and never concurrently.

    Implementations must:
    - Return a non-None root node from discover()
    - Build every unique ID below the supplied root unique ID
    - Report node lifecycle events only through the listener carried
      by the ExecutionRequest
    """

    __test__ = False

    @property
    @abstractmethod
    def engine_id(self) -> str:
        """Stable, unique identifier of this engine (e.g. "unit")."""

    @abstractmethod
    def discover(self, request: DiscoveryRequest, unique_id: UniqueId) -> Node:
        """Discover nodes for the request below the given root unique ID.

        Args:
            request: The discovery request, never mutated by the engine.
            unique_id: Unique ID the returned root node must carry.

        Returns:
            The engine's root node. Must not be None.

        Raises:
            Exception: Any failure. The launcher logs it and continues
                without this engine.
        """

    @abstractmethod
    def execute(self, request: ExecutionRequest) -> None:
        """Execute the tree rooted at request.root_node.

        Args:
            request: Root node, listener and configuration parameters.

        Raises:
            Exception: Any failure. The launcher logs it and continues
                with the remaining engines.
        """


@dataclass(frozen=True)
class SuiteDeclaration:
    """What a suite declares: its name, selectors and own filters."""

    name: str
    display_name: str
    selectors: tuple[DiscoverySelector, ...]
    engine_filters: tuple[Filter[TestEnginePort], ...] = ()
    post_discovery_filters: tuple[Filter[Node], ...] = ()

    def __post_init__(self) -> None:
        """Store every sequence field as a tuple."""
        object.__setattr__(self, "selectors", tuple(self.selectors))
        object.__setattr__(self, "engine_filters", tuple(self.engine_filters))
        object.__setattr__(self, "post_discovery_filters", tuple(self.post_discovery_filters))


class SuiteResolverPort(ABC):
    """Port for finding the suites reachable from the selectors of a request.

    How a suite is marked (decorator, configuration file, naming
    convention) is the adapter's concern.
    """

    @abstractmethod
    def suites_for(self, selector: DiscoverySelector) -> list[SuiteDeclaration]:
        """Return the suites reachable from the selector, in declaration order.

        A class selector yields at most one suite; a module selector yields
        every suite declared in that module.

        Returns:
            Suite declarations, empty if the selector reaches no suite.
        """


# ============================================================================
# LISTENER PORTS (Lifecycle events)
# ============================================================================


class EngineExecutionListener(ABC):
    """Receives node-level events from an engine during execution.

    All methods default to no-ops so implementations override only what
    they need.
    """

    def dynamic_test_registered(self, node: Node) -> None:
        """A node was added to the tree during execution."""

    def execution_skipped(self, node: Node, reason: str) -> None:
        """A node was skipped and will not be started."""

    def execution_started(self, node: Node) -> None:
        """A node is about to execute."""

    def execution_finished(self, node: Node, result: ExecutionResult) -> None:
        """A node finished executing, successfully or not."""

    def reporting_entry_published(self, node: Node, entry: ReportEntry) -> None:
        """An engine published extra data for a node."""


class ExecutionListener(ABC):
    """Observes a test plan's execution from the embedding application.

    All methods default to no-ops. Exceptions raised by a listener are
    not contained: they abort the running notification and propagate to
    the caller of Launcher.execute().
    """

    def test_plan_execution_started(self, plan: "TestPlan") -> None:
        """Execution of the whole plan is about to start."""

    def test_plan_execution_finished(self, plan: "TestPlan") -> None:
        """Execution of the whole plan has finished."""

    def dynamic_test_registered(self, identifier: Identifier) -> None:
        """A node was registered dynamically during execution."""

    def execution_skipped(self, identifier: Identifier, reason: str) -> None:
        """A node was skipped."""

    def execution_started(self, identifier: Identifier) -> None:
        """A node started executing."""

    def execution_finished(self, identifier: Identifier, result: ExecutionResult) -> None:
        """A node finished executing."""

    def reporting_entry_published(self, identifier: Identifier, entry: ReportEntry) -> None:
        """Extra data was published for a node."""


__all__ = [
    "EngineExecutionListener",
    "ExecutionListener",
    "SuiteDeclaration",
    "SuiteResolverPort",
    "TestEnginePort",
]
