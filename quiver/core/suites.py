"""Suite expansion: one extra rooted request per suite in a request."""

import logging

from .models import SUITE_SEGMENT_TYPE, Node, NodeType, UniqueId
from .ports import SuiteDeclaration, SuiteResolverPort
from .requests import DiscoveryRequest, RootedRequest

logger = logging.getLogger(__name__)


class SuiteExpander:
    """Finds suites among a request's selectors and re-roots discovery under them.

    Each suite's nested request uses the suite's declared selectors and
    inherits the parent request's filters and configuration parameters,
    followed by the suite's own filters. Suites selected from inside a
    suite are not expanded again.
    """

    def __init__(self, resolver: SuiteResolverPort | None = None):
        self.resolver = resolver

    def resolve(self, request: DiscoveryRequest) -> list[RootedRequest]:
        if self.resolver is None:
            return []

        rooted: list[RootedRequest] = []
        seen: set[str] = set()
        for selector in request.selectors:
            for declaration in self.resolver.suites_for(selector):
                if declaration.name in seen:
                    continue
                seen.add(declaration.name)
                logger.debug(
                    f"Expanding suite '{declaration.name}' with "
                    f"{len(declaration.selectors)} selector(s)."
                )
                rooted.append(
                    RootedRequest(
                        request=self._nested_request(request, declaration),
                        suite_node=self._suite_node(declaration),
                    )
                )
        return rooted

    @staticmethod
    def _nested_request(parent: DiscoveryRequest, declaration: SuiteDeclaration) -> DiscoveryRequest:
        return DiscoveryRequest(
            selectors=declaration.selectors,
            engine_filters=parent.engine_filters + declaration.engine_filters,
            post_discovery_filters=parent.post_discovery_filters + declaration.post_discovery_filters,
            configuration_parameters=parent.configuration_parameters,
        )

    @staticmethod
    def _suite_node(declaration: SuiteDeclaration) -> Node:
        return Node(
            unique_id=UniqueId.root(SUITE_SEGMENT_TYPE, declaration.name),
            display_name=declaration.display_name,
            node_type=NodeType.CONTAINER,
            source=declaration.name,
        )


__all__ = ["SuiteExpander"]
