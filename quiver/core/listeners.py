"""Listener registry, composite fan-out, and engine-event adaptation."""

from collections.abc import Iterable

from .errors import require_no_none_elements
from .models import ExecutionResult, Identifier, Node, ReportEntry
from .plan import TestPlan
from .ports import EngineExecutionListener, ExecutionListener


class CompositeExecutionListener(ExecutionListener):
    """Forwards every event to its listeners in registration order.

    A listener that raises aborts the event for the listeners after it;
    the exception propagates to the caller.
    """

    def __init__(self, listeners: Iterable[ExecutionListener]):
        self.listeners = tuple(listeners)

    def test_plan_execution_started(self, plan: TestPlan) -> None:
        for listener in self.listeners:
            listener.test_plan_execution_started(plan)

    def test_plan_execution_finished(self, plan: TestPlan) -> None:
        for listener in self.listeners:
            listener.test_plan_execution_finished(plan)

    def dynamic_test_registered(self, identifier: Identifier) -> None:
        for listener in self.listeners:
            listener.dynamic_test_registered(identifier)

    def execution_skipped(self, identifier: Identifier, reason: str) -> None:
        for listener in self.listeners:
            listener.execution_skipped(identifier, reason)

    def execution_started(self, identifier: Identifier) -> None:
        for listener in self.listeners:
            listener.execution_started(identifier)

    def execution_finished(self, identifier: Identifier, result: ExecutionResult) -> None:
        for listener in self.listeners:
            listener.execution_finished(identifier, result)

    def reporting_entry_published(self, identifier: Identifier, entry: ReportEntry) -> None:
        for listener in self.listeners:
            listener.reporting_entry_published(identifier, entry)


class ListenerRegistry:
    """Ordered, append-only collection of execution listeners.

    A registry created from a parent starts with a copy of the parent's
    listeners; registering on it never touches the parent.
    """

    def __init__(self, parent: "ListenerRegistry | None" = None):
        self._listeners: list[ExecutionListener] = list(parent.listeners) if parent else []

    @property
    def listeners(self) -> tuple[ExecutionListener, ...]:
        return tuple(self._listeners)

    def register(self, *listeners: ExecutionListener) -> None:
        self._listeners.extend(
            require_no_none_elements(listeners, "individual listeners must not be None")
        )

    def composite(self) -> CompositeExecutionListener:
        return CompositeExecutionListener(self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)


class ExecutionListenerAdapter(EngineExecutionListener):
    """Translates an engine's node events into plan identifier events.

    Nodes registered dynamically during execution are not part of the
    (immutable) plan; their identifiers are derived from the node itself.
    """

    def __init__(self, plan: TestPlan, delegate: ExecutionListener):
        self.plan = plan
        self.delegate = delegate

    def _identifier(self, node: Node) -> Identifier:
        unique_id = str(node.unique_id)
        if self.plan.contains(unique_id):
            return self.plan.get_identifier(unique_id)
        return Identifier.from_node(node)

    def dynamic_test_registered(self, node: Node) -> None:
        self.delegate.dynamic_test_registered(self._identifier(node))

    def execution_skipped(self, node: Node, reason: str) -> None:
        self.delegate.execution_skipped(self._identifier(node), reason)

    def execution_started(self, node: Node) -> None:
        self.delegate.execution_started(self._identifier(node))

    def execution_finished(self, node: Node, result: ExecutionResult) -> None:
        self.delegate.execution_finished(self._identifier(node), result)

    def reporting_entry_published(self, node: Node, entry: ReportEntry) -> None:
        self.delegate.reporting_entry_published(self._identifier(node), entry)


__all__ = [
    "CompositeExecutionListener",
    "ExecutionListenerAdapter",
    "ListenerRegistry",
]
