"""The launcher: public entry point for discovering and executing tests.

Flow for one call:

    request -> SuiteExpander -> [request, suite_1, ..., suite_n]
            -> DiscoveryRunner.resolve() per rooted request (filter + prune)
            -> assemble_plan()          (discover)
            -> ExecutionDispatcher      (execute)

One launcher instance is meant to serve one call at a time, since the
engines it holds are shared and not guaranteed to be reentrant.
"""

import logging
from collections.abc import Iterable

from .discovery import DiscoveryRunner, Phase, ResolvedResult
from .errors import (
    LauncherError,
    require_no_none_elements,
    require_not_empty,
    require_not_none,
)
from .execution import ExecutionDispatcher
from .listeners import ListenerRegistry
from .plan import TestPlan, assemble_plan
from .ports import ExecutionListener, SuiteResolverPort, TestEnginePort
from .requests import DiscoveryRequest, RootedRequest
from .suites import SuiteExpander

logger = logging.getLogger(__name__)


class Launcher:
    """Orchestrates discovery and execution across registered engines."""

    def __init__(
        self,
        engines: Iterable[TestEnginePort],
        suite_resolver: SuiteResolverPort | None = None,
        strict_engine_contracts: bool = False,
    ):
        require_not_none(engines, "engines must not be None")
        engine_list = require_no_none_elements(engines, "individual engines must not be None")
        if not engine_list:
            raise LauncherError(
                "Cannot create Launcher without at least one engine; "
                "consider installing an engine distribution"
            )
        self.engines = self._validate_unique_ids(engine_list)
        self.listener_registry = ListenerRegistry()
        self._suite_expander = SuiteExpander(suite_resolver)
        self._runner = DiscoveryRunner(self.engines, strict_engine_contracts)
        self._dispatcher = ExecutionDispatcher(self.listener_registry)
        logger.debug(
            f"Launcher created with engines: {[engine.engine_id for engine in self.engines]}"
        )

    @staticmethod
    def _validate_unique_ids(engines: list[TestEnginePort]) -> tuple[TestEnginePort, ...]:
        ids: set[str] = set()
        for engine in engines:
            if engine.engine_id in ids:
                raise LauncherError(
                    f"Cannot create Launcher for multiple engines with the same ID "
                    f"'{engine.engine_id}'."
                )
            ids.add(engine.engine_id)
        return tuple(engines)

    def register_listeners(self, *listeners: ExecutionListener) -> None:
        """Register listeners notified on every subsequent execute() call."""
        require_not_empty(listeners, "listeners must not be empty")
        self.listener_registry.register(*listeners)

    def discover(self, request: DiscoveryRequest) -> TestPlan:
        """Discover tests for request and return the assembled plan."""
        require_not_none(request, "DiscoveryRequest must not be None")
        return assemble_plan(self._discover(request, Phase.DISCOVERY))

    def execute(self, request: DiscoveryRequest, *listeners: ExecutionListener) -> None:
        """Discover and execute tests for request.

        Listeners passed here are notified for this call only, after the
        registered ones.
        """
        require_not_none(request, "DiscoveryRequest must not be None")
        require_no_none_elements(listeners, "individual listeners must not be None")
        results = self._discover(request, Phase.EXECUTION)
        self._dispatcher.execute(results, request.configuration_parameters, *listeners)

    def _discover(self, request: DiscoveryRequest, phase: Phase) -> list[ResolvedResult]:
        requests = [RootedRequest(request), *self._suite_expander.resolve(request)]
        return [self._runner.resolve(phase, rooted) for rooted in requests]


__all__ = ["Launcher"]
