"""Logging execution listener.

Implements ExecutionListener by writing every lifecycle event to a
standard library logger.
"""

import logging

from quiver.core.models import ExecutionResult, ExecutionStatus, Identifier, ReportEntry
from quiver.core.plan import TestPlan
from quiver.core.ports import ExecutionListener

logger = logging.getLogger(__name__)


class LoggingListener(ExecutionListener):
    """Logs lifecycle events at a fixed level.

    Failed and aborted results are logged with the error attached as
    exc_info so handlers can render the traceback.
    """

    def __init__(self, target: logging.Logger | None = None, level: int = logging.INFO):
        """Initialize logging listener.

        Args:
            target: Logger to write to. Defaults to this module's logger.
            level: Level used for every event.
        """
        self.target = target or logger
        self.level = level

    def test_plan_execution_started(self, plan: TestPlan) -> None:
        self.target.log(
            self.level,
            f"Test plan execution started with {len(plan.roots)} root(s) "
            f"and {len(plan)} node(s)",
        )

    def test_plan_execution_finished(self, plan: TestPlan) -> None:
        self.target.log(self.level, f"Test plan execution finished: {plan!r}")

    def dynamic_test_registered(self, identifier: Identifier) -> None:
        self.target.log(self.level, f"Dynamic test registered: {identifier.unique_id}")

    def execution_skipped(self, identifier: Identifier, reason: str) -> None:
        self.target.log(self.level, f"Execution skipped: {identifier.display_name} - {reason}")

    def execution_started(self, identifier: Identifier) -> None:
        self.target.log(self.level, f"Execution started: {identifier.display_name}")

    def execution_finished(self, identifier: Identifier, result: ExecutionResult) -> None:
        message = (
            f"Execution finished: {identifier.display_name} - {result.status.value.upper()}"
        )
        if result.status is not ExecutionStatus.SUCCESSFUL and result.error is not None:
            self.target.log(self.level, message, exc_info=result.error)
        else:
            self.target.log(self.level, message)

    def reporting_entry_published(self, identifier: Identifier, entry: ReportEntry) -> None:
        values = ", ".join(f"{key}={value}" for key, value in entry.values.items())
        self.target.log(
            self.level, f"Reporting entry published for {identifier.display_name}: {values}"
        )


__all__ = ["LoggingListener"]
