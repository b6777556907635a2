"""Domain models for the Quiver launcher core.

The descriptor tree shared by all engines lives here: unique IDs, nodes,
their external identifiers, and the values reported during execution.
All models use only Python standard library types.
"""

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import PreconditionViolationError

ENGINE_SEGMENT_TYPE = "engine"
SUITE_SEGMENT_TYPE = "suite"

_SEGMENT_PATTERN = re.compile(r"^\[([^:\[\]]+):(.*)\]$")


@dataclass(frozen=True)
class Segment:
    """A single (type, value) pair in a unique ID."""

    type: str
    value: str

    def __post_init__(self) -> None:
        """Validate segment invariants on creation."""
        if not self.type or not self.type.strip():
            raise PreconditionViolationError("segment type must be a non-empty string")
        if ":" in self.type or "[" in self.type or "]" in self.type:
            raise PreconditionViolationError(
                f"segment type must not contain ':', '[' or ']', got {self.type!r}"
            )
        if not self.value or not self.value.strip():
            raise PreconditionViolationError("segment value must be a non-empty string")

    def __str__(self) -> str:
        return f"[{self.type}:{self.value}]"


@dataclass(frozen=True)
class UniqueId:
    """Hierarchical identifier of a node.

    Rendered as ``[engine:alpha]/[class:pkg.Foo]/[method:test_x]``.
    Appending never mutates; it returns a new UniqueId.
    """

    segments: tuple[Segment, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise PreconditionViolationError("a UniqueId needs at least one segment")

    @classmethod
    def root(cls, segment_type: str, value: str) -> "UniqueId":
        """Create a one-segment unique ID."""
        return cls((Segment(segment_type, value),))

    @classmethod
    def for_engine(cls, engine_id: str) -> "UniqueId":
        """Create the top-level unique ID for an engine."""
        return cls.root(ENGINE_SEGMENT_TYPE, engine_id)

    @classmethod
    def parse(cls, text: str) -> "UniqueId":
        """Parse the string form produced by ``str(unique_id)``."""
        if not text or not text.strip():
            raise PreconditionViolationError("cannot parse an empty unique ID")
        if not (text.startswith("[") and text.endswith("]")):
            raise PreconditionViolationError(f"malformed unique ID: {text!r}")
        segments = []
        for part in text[1:-1].split("]/["):
            match = _SEGMENT_PATTERN.match(f"[{part}]")
            if match is None:
                raise PreconditionViolationError(f"malformed unique ID: {text!r}")
            segments.append(Segment(match.group(1), match.group(2)))
        return cls(tuple(segments))

    def append(self, segment_type: str, value: str) -> "UniqueId":
        """Return a new unique ID with one more segment."""
        return UniqueId(self.segments + (Segment(segment_type, value),))

    def has_prefix(self, other: "UniqueId") -> bool:
        """True if other's segments are a leading run of this ID's segments."""
        size = len(other.segments)
        return self.segments[:size] == other.segments

    @property
    def last_segment(self) -> Segment:
        return self.segments[-1]

    @property
    def engine_id(self) -> str | None:
        """Value of the first engine segment, or None."""
        for segment in self.segments:
            if segment.type == ENGINE_SEGMENT_TYPE:
                return segment.value
        return None

    def __str__(self) -> str:
        return "/".join(str(segment) for segment in self.segments)


class NodeType(Enum):
    """Kind of work a node represents."""

    CONTAINER = "container"
    TEST = "test"
    CONTAINER_AND_TEST = "container_and_test"

    @property
    def is_container(self) -> bool:
        return self in {NodeType.CONTAINER, NodeType.CONTAINER_AND_TEST}

    @property
    def is_test(self) -> bool:
        return self in {NodeType.TEST, NodeType.CONTAINER_AND_TEST}


class Node:
    """A node in an engine's descriptor tree.

    Children are owned exclusively by their parent and kept in insertion
    order, keyed by unique ID. The parent link is a non-owning back
    reference used for lookups only; removing a node means detaching it
    from its parent's child collection.
    """

    def __init__(
        self,
        unique_id: UniqueId,
        display_name: str,
        node_type: NodeType = NodeType.CONTAINER,
        tags: frozenset[str] | set[str] | tuple[str, ...] = frozenset(),
        source: str | None = None,
    ):
        if unique_id is None:
            raise PreconditionViolationError("unique_id must not be None")
        if not display_name or not display_name.strip():
            raise PreconditionViolationError("display_name must be a non-empty string")
        self.unique_id = unique_id
        self.display_name = display_name
        self.type = node_type
        self.tags = frozenset(tags)
        self.source = source
        self.parent: Node | None = None
        self._children: dict[UniqueId, Node] = {}

    @property
    def children(self) -> tuple["Node", ...]:
        return tuple(self._children.values())

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_test(self) -> bool:
        return self.type.is_test

    @property
    def is_container(self) -> bool:
        return self.type.is_container

    def add_child(self, child: "Node") -> None:
        """Attach child under this node, detaching it from any previous parent."""
        if child is None:
            raise PreconditionViolationError("child must not be None")
        if child is self:
            raise PreconditionViolationError("a node cannot be its own child")
        existing = self._children.get(child.unique_id)
        if existing is not None and existing is not child:
            raise PreconditionViolationError(
                f"{self.unique_id} already has a child with unique ID {child.unique_id}"
            )
        if child.parent is not None and child.parent is not self:
            child.parent.remove_child(child)
        child.parent = self
        self._children[child.unique_id] = child

    def remove_child(self, child: "Node") -> None:
        """Detach child from this node. Unknown children are ignored."""
        if self._children.get(child.unique_id) is child:
            del self._children[child.unique_id]
            child.parent = None

    def remove_from_hierarchy(self) -> None:
        """Detach this node from its parent and drop its own children."""
        if self.parent is None:
            raise PreconditionViolationError(
                f"cannot remove root node {self.unique_id} from its hierarchy"
            )
        self.parent.remove_child(self)
        for child in list(self._children.values()):
            self.remove_child(child)

    def has_tests(self) -> bool:
        """True if this node or any descendant is a test."""
        return self.is_test or any(child.has_tests() for child in self._children.values())

    def accept(self, visitor: Callable[["Node"], None]) -> None:
        """Visit this node, then its children, pre-order.

        Children are snapshotted before visiting, so the visitor may
        detach nodes safely.
        """
        visitor(self)
        for child in list(self._children.values()):
            child.accept(visitor)

    def walk_post_order(self) -> Iterator["Node"]:
        """Yield descendants children-first, then this node."""
        for child in list(self._children.values()):
            yield from child.walk_post_order()
        yield self

    @property
    def descendants(self) -> list["Node"]:
        result: list[Node] = []
        for child in self._children.values():
            result.append(child)
            result.extend(child.descendants)
        return result

    def find_by_unique_id(self, unique_id: UniqueId) -> "Node | None":
        if self.unique_id == unique_id:
            return self
        for child in self._children.values():
            found = child.find_by_unique_id(unique_id)
            if found is not None:
                return found
        return None

    def __repr__(self) -> str:
        return f"Node({self.unique_id}, {self.display_name!r}, {self.type.name})"


@dataclass(frozen=True)
class Identifier:
    """Immutable external view of a node, as exposed in a test plan."""

    unique_id: str
    parent_id: str | None
    display_name: str
    type: NodeType
    tags: frozenset[str] = field(default_factory=frozenset)
    source: str | None = None

    @classmethod
    def from_node(cls, node: Node) -> "Identifier":
        parent_id = str(node.parent.unique_id) if node.parent is not None else None
        return cls(
            unique_id=str(node.unique_id),
            parent_id=parent_id,
            display_name=node.display_name,
            type=node.type,
            tags=node.tags,
            source=node.source,
        )

    @property
    def is_test(self) -> bool:
        return self.type.is_test

    @property
    def is_container(self) -> bool:
        return self.type.is_container


class ExecutionStatus(Enum):
    """Outcome of executing a node."""

    SUCCESSFUL = "successful"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing a single node."""

    status: ExecutionStatus
    error: BaseException | None = None

    @classmethod
    def successful(cls) -> "ExecutionResult":
        return cls(ExecutionStatus.SUCCESSFUL)

    @classmethod
    def aborted(cls, error: BaseException | None = None) -> "ExecutionResult":
        return cls(ExecutionStatus.ABORTED, error)

    @classmethod
    def failed(cls, error: BaseException | None = None) -> "ExecutionResult":
        return cls(ExecutionStatus.FAILED, error)


@dataclass(frozen=True)
class ReportEntry:
    """Key/value data published by an engine while executing a node."""

    timestamp: datetime
    values: Mapping[str, str]  # converted to proxy in __post_init__

    def __post_init__(self) -> None:
        """Validate keys and convert values to a read-only proxy."""
        if not self.values:
            raise PreconditionViolationError("a report entry needs at least one value")
        for key in self.values:
            if not key or not key.strip():
                raise PreconditionViolationError("report entry keys must be non-empty strings")
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ReportEntry":
        return cls(
            timestamp=datetime.now(timezone.utc),
            values={key: str(value) for key, value in values.items()},
        )


__all__ = [
    "ENGINE_SEGMENT_TYPE",
    "SUITE_SEGMENT_TYPE",
    "ExecutionResult",
    "ExecutionStatus",
    "Identifier",
    "Node",
    "NodeType",
    "ReportEntry",
    "Segment",
    "UniqueId",
]
