"""Core orchestration logic for the Quiver test launcher.

This package contains zero external dependencies and represents the
engine-independent part of the launcher: the descriptor tree, requests,
filters, discovery, plan assembly and execution dispatch. Concrete
listeners and suite resolvers live in the adapters package.
"""

from .discovery import DiscoveryRunner, Phase, ResolvedResult
from .errors import (
    EngineContractViolation,
    LauncherError,
    PreconditionViolationError,
    QuiverError,
)
from .execution import ExecutionDispatcher
from .filters import (
    ClassNameFilter,
    DisplayNameFilter,
    EngineFilter,
    Filter,
    FilterResult,
    ModuleNameFilter,
    TagFilter,
    compose_filters,
)
from .launcher import Launcher
from .listeners import CompositeExecutionListener, ExecutionListenerAdapter, ListenerRegistry
from .models import (
    ExecutionResult,
    ExecutionStatus,
    Identifier,
    Node,
    NodeType,
    ReportEntry,
    Segment,
    UniqueId,
)
from .plan import TestPlan, assemble_plan
from .ports import (
    EngineExecutionListener,
    ExecutionListener,
    SuiteDeclaration,
    SuiteResolverPort,
    TestEnginePort,
)
from .requests import (
    ClassSelector,
    ConfigurationParameters,
    DiscoveryRequest,
    DiscoveryRequestBuilder,
    ExecutionRequest,
    MethodSelector,
    ModuleSelector,
    RootedRequest,
    UniqueIdSelector,
    select_class,
    select_method,
    select_module,
    select_unique_id,
)
from .suites import SuiteExpander

__all__ = [
    "ClassNameFilter",
    "ClassSelector",
    "CompositeExecutionListener",
    "ConfigurationParameters",
    "DiscoveryRequest",
    "DiscoveryRequestBuilder",
    "DiscoveryRunner",
    "DisplayNameFilter",
    "EngineContractViolation",
    "EngineExecutionListener",
    "EngineFilter",
    "ExecutionDispatcher",
    "ExecutionListener",
    "ExecutionListenerAdapter",
    "ExecutionRequest",
    "ExecutionResult",
    "ExecutionStatus",
    "Filter",
    "FilterResult",
    "Identifier",
    "Launcher",
    "LauncherError",
    "ListenerRegistry",
    "MethodSelector",
    "ModuleNameFilter",
    "ModuleSelector",
    "Node",
    "NodeType",
    "Phase",
    "PreconditionViolationError",
    "QuiverError",
    "ReportEntry",
    "ResolvedResult",
    "RootedRequest",
    "Segment",
    "SuiteDeclaration",
    "SuiteExpander",
    "SuiteResolverPort",
    "TagFilter",
    "TestEnginePort",
    "TestPlan",
    "UniqueId",
    "UniqueIdSelector",
    "assemble_plan",
    "compose_filters",
    "select_class",
    "select_method",
    "select_module",
    "select_unique_id",
]
