"""Unit tests for port interface contracts.

Tests verify that port abstract base classes are properly defined
and that implementations must satisfy the interface contract.
"""

import pytest

from quiver.core.models import Identifier, NodeType
from quiver.core.plan import TestPlan
from quiver.core.ports import (
    EngineExecutionListener,
    ExecutionListener,
    SuiteDeclaration,
    SuiteResolverPort,
    TestEnginePort,
)
from quiver.core.requests import select_class


class TestAbstractPorts:
    def test_engine_port_requires_all_methods(self) -> None:
        class PartialEngine(TestEnginePort):
            @property
            def engine_id(self) -> str:
                return "partial"

        with pytest.raises(TypeError):
            PartialEngine()  # type: ignore[abstract]

    def test_suite_resolver_port_requires_all_methods(self) -> None:
        class PartialResolver(SuiteResolverPort):
            pass

        with pytest.raises(TypeError):
            PartialResolver()  # type: ignore[abstract]


class TestListenerDefaults:
    def test_execution_listener_methods_are_no_ops(self) -> None:
        class OnlyStarted(ExecutionListener):
            pass

        listener = OnlyStarted()
        identifier = Identifier("[engine:a]", None, "a", NodeType.CONTAINER)
        plan = TestPlan([])

        listener.test_plan_execution_started(plan)
        listener.execution_started(identifier)
        listener.execution_skipped(identifier, "reason")
        listener.test_plan_execution_finished(plan)

    def test_engine_listener_is_instantiable(self) -> None:
        assert isinstance(EngineExecutionListener(), EngineExecutionListener)


class TestSuiteDeclaration:
    def test_defaults_to_no_filters(self) -> None:
        declaration = SuiteDeclaration("pkg.Suite", "Suite", (select_class("pkg.Foo"),))
        assert declaration.engine_filters == ()
        assert declaration.post_discovery_filters == ()

    def test_is_immutable(self) -> None:
        declaration = SuiteDeclaration("pkg.Suite", "Suite", (select_class("pkg.Foo"),))
        with pytest.raises(AttributeError):
            declaration.name = "other"  # type: ignore[misc]
