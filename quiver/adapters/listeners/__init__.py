"""Execution listeners for observing test plan execution.

Implementations:
- LoggingListener: writes lifecycle events to a standard library logger
- SummaryGeneratingListener: counts outcomes into an ExecutionSummary
"""

from .log import LoggingListener
from .summary import ExecutionSummary, Failure, SummaryGeneratingListener

__all__ = [
    "ExecutionSummary",
    "Failure",
    "LoggingListener",
    "SummaryGeneratingListener",
]
