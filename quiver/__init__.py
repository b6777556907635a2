"""Quiver: a test-orchestration launcher for pluggable test engines."""

from quiver.adapters.listeners import LoggingListener, SummaryGeneratingListener
from quiver.adapters.suites import DecoratedSuiteResolver, suite
from quiver.core import (
    DiscoveryRequest,
    DiscoveryRequestBuilder,
    EngineFilter,
    ExecutionListener,
    Launcher,
    TagFilter,
    TestEnginePort,
    TestPlan,
    select_class,
    select_method,
    select_module,
    select_unique_id,
)

__version__ = "0.1.0"

__all__ = [
    "DecoratedSuiteResolver",
    "DiscoveryRequest",
    "DiscoveryRequestBuilder",
    "EngineFilter",
    "ExecutionListener",
    "Launcher",
    "LoggingListener",
    "SummaryGeneratingListener",
    "TagFilter",
    "TestEnginePort",
    "TestPlan",
    "select_class",
    "select_method",
    "select_module",
    "select_unique_id",
    "suite",
]
