"""Execution dispatch: replays resolved results through each engine.

The dispatcher brackets the whole run and every suite with lifecycle
events. Node-level events inside an engine's tree are emitted by the
engine itself through the ExecutionListenerAdapter.
"""

import logging
from collections.abc import Sequence

from .discovery import ResolvedResult, handle_engine_failure
from .listeners import ExecutionListenerAdapter, ListenerRegistry
from .models import ExecutionResult
from .plan import assemble_plan
from .ports import ExecutionListener, TestEnginePort
from .requests import ConfigurationParameters, ExecutionRequest

logger = logging.getLogger(__name__)


class ExecutionDispatcher:
    """Drives execution of resolved results with fault-isolated engines."""

    def __init__(self, registry: ListenerRegistry):
        self.registry = registry

    def execute(
        self,
        results: Sequence[ResolvedResult],
        parameters: ConfigurationParameters,
        *listeners: ExecutionListener,
    ) -> None:
        """Execute every result in order.

        Steps:
        1. Build the call-scoped listener and the plan
        2. Announce plan start
        3. Per result: bracket the suite (if any) around each engine's execute()
        4. Announce plan finish

        Engine failures are logged and contained. Listener failures propagate.
        """
        listener = self._registry_for_call(listeners).composite()
        plan = assemble_plan(results)

        listener.test_plan_execution_started(plan)
        engine_listener = ExecutionListenerAdapter(plan, listener)
        for result in results:
            if result.suite_identifier is not None:
                listener.execution_started(result.suite_identifier)
            for engine in result.engines:
                request = ExecutionRequest(
                    root_node=result.root_for(engine),
                    listener=engine_listener,
                    configuration_parameters=parameters,
                )
                self._execute_engine(engine, request)
            if result.suite_identifier is not None:
                listener.execution_finished(result.suite_identifier, ExecutionResult.successful())
        listener.test_plan_execution_finished(plan)

    def _registry_for_call(self, listeners: Sequence[ExecutionListener]) -> ListenerRegistry:
        if not listeners:
            return self.registry
        registry = ListenerRegistry(self.registry)
        registry.register(*listeners)
        return registry

    @staticmethod
    def _execute_engine(engine: TestEnginePort, request: ExecutionRequest) -> None:
        logger.debug(f"Executing tests in engine '{engine.engine_id}'.")
        try:
            engine.execute(request)
        except Exception as e:
            handle_engine_failure(engine, "execute", e)


__all__ = ["ExecutionDispatcher"]
