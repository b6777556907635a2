"""Fake ExecutionListener implementation for testing."""

from quiver.core.models import ExecutionResult, Identifier, ReportEntry
from quiver.core.plan import TestPlan
from quiver.core.ports import ExecutionListener


class RecordingListener(ExecutionListener):
    """Captures every lifecycle event for test assertions.

    Events are stored as tuples: ``(event_name, unique_id_or_plan, ...)``.
    Several listeners can share one ``log`` list to assert ordering across
    listeners.
    """

    def __init__(self, name: str = "listener", log: list[tuple[str, str]] | None = None):
        self.name = name
        self.events: list[tuple] = []
        self.log = log if log is not None else []
        self.plans: list[TestPlan] = []
        self.results: dict[str, ExecutionResult] = {}
        self.fail_on: str | None = None
        self.fail_message = "Listener failed"

    def _record(self, event: str, *details: object) -> None:
        self.log.append((self.name, event))
        self.events.append((event, *details))
        if self.fail_on == event:
            raise RuntimeError(self.fail_message)

    def test_plan_execution_started(self, plan: TestPlan) -> None:
        self.plans.append(plan)
        self._record("plan_started", plan)

    def test_plan_execution_finished(self, plan: TestPlan) -> None:
        self._record("plan_finished", plan)

    def dynamic_test_registered(self, identifier: Identifier) -> None:
        self._record("dynamic", identifier.unique_id)

    def execution_skipped(self, identifier: Identifier, reason: str) -> None:
        self._record("skipped", identifier.unique_id, reason)

    def execution_started(self, identifier: Identifier) -> None:
        self._record("started", identifier.unique_id)

    def execution_finished(self, identifier: Identifier, result: ExecutionResult) -> None:
        self.results[identifier.unique_id] = result
        self._record("finished", identifier.unique_id, result.status)

    def reporting_entry_published(self, identifier: Identifier, entry: ReportEntry) -> None:
        self._record("entry", identifier.unique_id, dict(entry.values))

    def event_names(self) -> list[str]:
        """Names of the recorded events, in order."""
        return [event[0] for event in self.events]

    def started_ids(self) -> list[str]:
        return [event[1] for event in self.events if event[0] == "started"]

    def set_fail_on(self, event: str | None, message: str = "Listener failed") -> None:
        """Configure the listener to raise when event is received."""
        self.fail_on = event
        self.fail_message = message

    def reset(self) -> None:
        """Reset all recorded events and failure configuration."""
        self.events.clear()
        self.log.clear()
        self.plans.clear()
        self.results.clear()
        self.fail_on = None
