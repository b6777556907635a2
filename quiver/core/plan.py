"""Plan assembly: the flat, addressable view of discovered nodes.

A TestPlan is built once per discover/execute call from the roots of all
resolved results and is never mutated afterwards.
"""

from collections.abc import Callable, Iterable
from types import MappingProxyType

from .discovery import ResolvedResult, collect_roots
from .errors import PreconditionViolationError
from .models import Identifier, Node


class TestPlan:
    """Immutable index of every node reachable from the plan's roots.

    Identifiers are kept in discovery order; children of a node are
    listed in the order the engine attached them.
    """

    __test__ = False

    def __init__(self, roots: Iterable[Node]):
        root_nodes = list(roots)
        identifiers: dict[str, Identifier] = {}
        children: dict[str, list[Identifier]] = {}
        for root in root_nodes:
            for node in self._walk(root):
                identifier = Identifier.from_node(node)
                if identifier.unique_id in identifiers:
                    raise PreconditionViolationError(
                        f"duplicate unique ID in test plan: {identifier.unique_id}"
                    )
                identifiers[identifier.unique_id] = identifier
                if identifier.parent_id is not None:
                    children.setdefault(identifier.parent_id, []).append(identifier)
        self._roots = tuple(identifiers[str(root.unique_id)] for root in root_nodes)
        self._identifiers = MappingProxyType(identifiers)
        self._children = MappingProxyType(
            {parent_id: tuple(items) for parent_id, items in children.items()}
        )

    @staticmethod
    def _walk(node: Node) -> Iterable[Node]:
        yield node
        for child in node.children:
            yield from TestPlan._walk(child)

    @property
    def roots(self) -> tuple[Identifier, ...]:
        return self._roots

    def contains(self, unique_id: str) -> bool:
        return unique_id in self._identifiers

    def get_identifier(self, unique_id: str) -> Identifier:
        """Return the identifier for unique_id.

        Raises:
            PreconditionViolationError: If the plan has no such identifier.
        """
        if not unique_id or not unique_id.strip():
            raise PreconditionViolationError("unique_id must be a non-empty string")
        try:
            return self._identifiers[unique_id]
        except KeyError:
            raise PreconditionViolationError(
                f"no Identifier with unique ID [{unique_id}] has been added to this TestPlan"
            ) from None

    def get_parent(self, identifier: Identifier) -> Identifier | None:
        if identifier in self._roots or identifier.parent_id is None:
            return None
        return self._identifiers.get(identifier.parent_id)

    def get_children(self, parent: Identifier | str) -> tuple[Identifier, ...]:
        parent_id = parent if isinstance(parent, str) else parent.unique_id
        return self._children.get(parent_id, ())

    def get_descendants(self, parent: Identifier) -> list[Identifier]:
        result: list[Identifier] = []
        for child in self.get_children(parent):
            result.append(child)
            result.extend(self.get_descendants(child))
        return result

    def count_identifiers(self, predicate: Callable[[Identifier], bool]) -> int:
        return sum(1 for identifier in self._identifiers.values() if predicate(identifier))

    def contains_tests(self) -> bool:
        return any(identifier.is_test for identifier in self._identifiers.values())

    def __len__(self) -> int:
        return len(self._identifiers)

    def __repr__(self) -> str:
        return f"TestPlan(roots={[root.unique_id for root in self._roots]!r}, size={len(self)})"


def assemble_plan(results: Iterable[ResolvedResult]) -> TestPlan:
    """Flatten the exposed roots of every result into one plan.

    A result rooted at a suite exposes only the suite node; otherwise it
    exposes each engine root in engine order.
    """
    return TestPlan(collect_roots(results))


__all__ = ["TestPlan", "assemble_plan"]
