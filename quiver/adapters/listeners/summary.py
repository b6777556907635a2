"""Summary-generating execution listener.

Counts containers and tests as they move through the lifecycle and
produces an immutable ExecutionSummary once the plan has finished.
"""

import time
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from quiver.core.models import ExecutionResult, ExecutionStatus, Identifier
from quiver.core.plan import TestPlan
from quiver.core.ports import ExecutionListener


@dataclass(frozen=True)
class Failure:
    """A container or test that did not finish successfully."""

    identifier: Identifier
    error: BaseException | None


@dataclass(frozen=True)
class ExecutionSummary:
    """Counts collected over one test plan execution."""

    time_started: datetime
    time_finished: datetime | None
    duration_seconds: float
    containers_found: int
    containers_started: int
    containers_skipped: int
    containers_aborted: int
    containers_succeeded: int
    containers_failed: int
    tests_found: int
    tests_started: int
    tests_skipped: int
    tests_aborted: int
    tests_succeeded: int
    tests_failed: int
    failures: tuple[Failure, ...] = ()

    @property
    def total_failure_count(self) -> int:
        return self.containers_failed + self.tests_failed

    def format(self) -> str:
        """Render the summary as plain text."""
        lines = [
            "=" * 80,
            "TEST EXECUTION SUMMARY",
            "=" * 80,
            f"Duration: {self.duration_seconds:.3f}s",
            "",
            f"{self.containers_found:>6} containers found",
            f"{self.containers_skipped:>6} containers skipped",
            f"{self.containers_started:>6} containers started",
            f"{self.containers_aborted:>6} containers aborted",
            f"{self.containers_succeeded:>6} containers successful",
            f"{self.containers_failed:>6} containers failed",
            f"{self.tests_found:>6} tests found",
            f"{self.tests_skipped:>6} tests skipped",
            f"{self.tests_started:>6} tests started",
            f"{self.tests_aborted:>6} tests aborted",
            f"{self.tests_succeeded:>6} tests successful",
            f"{self.tests_failed:>6} tests failed",
        ]
        if self.failures:
            lines.extend(["", "-" * 80, "FAILURES", "-" * 80])
            for failure in self.failures:
                error = f" => {failure.error!r}" if failure.error is not None else ""
                lines.append(f"  {failure.identifier.display_name}{error}")
        lines.append("=" * 80)
        return "\n".join(lines)


class SummaryGeneratingListener(ExecutionListener):
    """Collects an ExecutionSummary for the most recent plan execution."""

    def __init__(self):
        self._plan: TestPlan | None = None
        self._counts: Counter[str] = Counter()
        self._failures: list[Failure] = []
        self._time_started: datetime | None = None
        self._time_finished: datetime | None = None
        self._started_at = 0.0
        self._finished_at: float | None = None

    def test_plan_execution_started(self, plan: TestPlan) -> None:
        self._plan = plan
        self._counts = Counter(
            containers_found=plan.count_identifiers(lambda i: i.is_container),
            tests_found=plan.count_identifiers(lambda i: i.is_test),
        )
        self._failures = []
        self._time_started = datetime.now(timezone.utc)
        self._time_finished = None
        self._started_at = time.monotonic()
        self._finished_at = None

    def test_plan_execution_finished(self, plan: TestPlan) -> None:
        self._time_finished = datetime.now(timezone.utc)
        self._finished_at = time.monotonic()

    def dynamic_test_registered(self, identifier: Identifier) -> None:
        self._count("found", identifier)

    def execution_skipped(self, identifier: Identifier, reason: str) -> None:
        self._count("skipped", identifier)
        if self._plan is not None and self._plan.contains(identifier.unique_id):
            for descendant in self._plan.get_descendants(identifier):
                self._count("skipped", descendant)

    def execution_started(self, identifier: Identifier) -> None:
        self._count("started", identifier)

    def execution_finished(self, identifier: Identifier, result: ExecutionResult) -> None:
        if result.status is ExecutionStatus.SUCCESSFUL:
            self._count("succeeded", identifier)
        elif result.status is ExecutionStatus.ABORTED:
            self._count("aborted", identifier)
        else:
            self._count("failed", identifier)
            self._failures.append(Failure(identifier, result.error))

    def _count(self, event: str, identifier: Identifier) -> None:
        if identifier.is_container:
            self._counts[f"containers_{event}"] += 1
        if identifier.is_test:
            self._counts[f"tests_{event}"] += 1

    @property
    def summary(self) -> ExecutionSummary:
        """Snapshot of the counts collected so far."""
        if self._time_started is None:
            raise RuntimeError("no test plan execution has been started")
        end = self._finished_at if self._finished_at is not None else time.monotonic()
        return ExecutionSummary(
            time_started=self._time_started,
            time_finished=self._time_finished,
            duration_seconds=end - self._started_at,
            failures=tuple(self._failures),
            **{field: self._counts[field] for field in _COUNT_FIELDS},
        )


_COUNT_FIELDS = tuple(
    f"{kind}_{event}"
    for kind in ("containers", "tests")
    for event in ("found", "started", "skipped", "aborted", "succeeded", "failed")
)


__all__ = ["ExecutionSummary", "Failure", "SummaryGeneratingListener"]
