"""Filters applied to engines before discovery and to nodes after it.

Engine filters decide which engines take part in a request at all.
Post-discovery filters decide which childless nodes survive in the
discovered trees. Several filters compose into one that excludes an
element as soon as any constituent filter excludes it.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from .errors import PreconditionViolationError
from .models import ENGINE_SEGMENT_TYPE, SUITE_SEGMENT_TYPE, Node

if TYPE_CHECKING:
    from .ports import TestEnginePort

T = TypeVar("T")

_ROOT_SEGMENT_TYPES = frozenset({ENGINE_SEGMENT_TYPE, SUITE_SEGMENT_TYPE})


@dataclass(frozen=True)
class FilterResult:
    """Verdict of a filter, with an optional human-readable reason."""

    included: bool
    reason: str | None = None

    @classmethod
    def include(cls, reason: str | None = None) -> "FilterResult":
        return cls(True, reason)

    @classmethod
    def exclude(cls, reason: str | None = None) -> "FilterResult":
        return cls(False, reason)

    @property
    def excluded(self) -> bool:
        return not self.included


class Filter(ABC, Generic[T]):
    """A predicate with a reason, applied to engines or nodes."""

    @abstractmethod
    def apply(self, element: T) -> FilterResult:
        """Decide whether element is included."""

    def to_predicate(self) -> Callable[[T], bool]:
        return lambda element: self.apply(element).included


class _IncludeAll(Filter[T]):
    def apply(self, element: T) -> FilterResult:
        return FilterResult.include("Always included")


class CompositeFilter(Filter[T]):
    """Excludes an element if any of its filters excludes it."""

    def __init__(self, filters: Iterable[Filter[T]]):
        self.filters = tuple(filters)

    def apply(self, element: T) -> FilterResult:
        for item in self.filters:
            result = item.apply(element)
            if result.excluded:
                return result
        return FilterResult.include("Element was included by all filters.")

    def __repr__(self) -> str:
        return f"CompositeFilter({list(self.filters)!r})"


def compose_filters(filters: Iterable[Filter[T]]) -> Filter[T]:
    """Combine filters into one; an empty collection includes everything."""
    items = tuple(filters)
    if any(item is None for item in items):
        raise PreconditionViolationError("filters must not contain None")
    if not items:
        return _IncludeAll()
    if len(items) == 1:
        return items[0]
    return CompositeFilter(items)


class EngineFilter(Filter["TestEnginePort"]):
    """Includes or excludes engines by ID."""

    def __init__(self, engine_ids: Iterable[str], include: bool):
        ids = [engine_id.strip() for engine_id in engine_ids if engine_id and engine_id.strip()]
        if not ids:
            raise PreconditionViolationError("engine IDs must not be empty")
        self.engine_ids = frozenset(ids)
        self.include = include

    @classmethod
    def include_engines(cls, *engine_ids: str) -> "EngineFilter":
        return cls(engine_ids, include=True)

    @classmethod
    def exclude_engines(cls, *engine_ids: str) -> "EngineFilter":
        return cls(engine_ids, include=False)

    def apply(self, engine: "TestEnginePort") -> FilterResult:
        matched = engine.engine_id in self.engine_ids
        if self.include:
            if matched:
                return FilterResult.include(f"Engine ID '{engine.engine_id}' is in included list")
            return FilterResult.exclude(f"Engine ID '{engine.engine_id}' is not in included list")
        if matched:
            return FilterResult.exclude(f"Engine ID '{engine.engine_id}' is in excluded list")
        return FilterResult.include(f"Engine ID '{engine.engine_id}' is not in excluded list")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EngineFilter):
            return NotImplemented
        return (self.engine_ids, self.include) == (other.engine_ids, other.include)

    def __hash__(self) -> int:
        return hash((EngineFilter, self.engine_ids, self.include))

    def __repr__(self) -> str:
        mode = "include" if self.include else "exclude"
        return f"EngineFilter({mode}={sorted(self.engine_ids)!r})"


class TagFilter(Filter[Node]):
    """Includes or excludes nodes carrying any of the given tags."""

    def __init__(self, tags: Iterable[str], include: bool):
        cleaned = [tag.strip() for tag in tags if tag and tag.strip()]
        if not cleaned:
            raise PreconditionViolationError("tags must not be empty")
        self.tags = frozenset(cleaned)
        self.include = include

    @classmethod
    def include_tags(cls, *tags: str) -> "TagFilter":
        return cls(tags, include=True)

    @classmethod
    def exclude_tags(cls, *tags: str) -> "TagFilter":
        return cls(tags, include=False)

    def apply(self, node: Node) -> FilterResult:
        matched = bool(node.tags & self.tags)
        if matched == self.include:
            return FilterResult.include(f"Tags {sorted(node.tags)} match {self!r}")
        return FilterResult.exclude(f"Tags {sorted(node.tags)} do not match {self!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagFilter):
            return NotImplemented
        return (self.tags, self.include) == (other.tags, other.include)

    def __hash__(self) -> int:
        return hash((TagFilter, self.tags, self.include))

    def __repr__(self) -> str:
        mode = "include" if self.include else "exclude"
        return f"TagFilter({mode}={sorted(self.tags)!r})"


class DisplayNameFilter(Filter[Node]):
    """Includes or excludes nodes whose display name matches a pattern."""

    def __init__(self, patterns: Iterable[str], include: bool):
        compiled = [re.compile(pattern) for pattern in patterns if pattern]
        if not compiled:
            raise PreconditionViolationError("patterns must not be empty")
        self.patterns = tuple(compiled)
        self.include = include

    @classmethod
    def include_patterns(cls, *patterns: str) -> "DisplayNameFilter":
        return cls(patterns, include=True)

    @classmethod
    def exclude_patterns(cls, *patterns: str) -> "DisplayNameFilter":
        return cls(patterns, include=False)

    def apply(self, node: Node) -> FilterResult:
        match = next(
            (p.pattern for p in self.patterns if p.fullmatch(node.display_name)), None
        )
        if self.include:
            if match is not None:
                return FilterResult.include(f"'{node.display_name}' matches '{match}'")
            return FilterResult.exclude(f"'{node.display_name}' matches no included pattern")
        if match is not None:
            return FilterResult.exclude(f"'{node.display_name}' matches excluded pattern '{match}'")
        return FilterResult.include(f"'{node.display_name}' matches no excluded pattern")


def _source_name(node: Node) -> str | None:
    """The source of the node or of its nearest ancestor below the engine root."""
    current: Node | None = node
    while current is not None:
        if current.unique_id.last_segment.type in _ROOT_SEGMENT_TYPES:
            return None
        if current.source:
            return current.source
        current = current.parent
    return None


class ClassNameFilter(Filter[Node]):
    """Includes or excludes nodes by the dotted name of the class they belong to.

    The class name is the source of the node or of its nearest ancestor.
    Nodes without any source are always included.
    """

    def __init__(self, patterns: Iterable[str], include: bool):
        compiled = [re.compile(pattern) for pattern in patterns if pattern]
        if not compiled:
            raise PreconditionViolationError("patterns must not be empty")
        self.patterns = tuple(compiled)
        self.include = include

    @classmethod
    def include_patterns(cls, *patterns: str) -> "ClassNameFilter":
        return cls(patterns, include=True)

    @classmethod
    def exclude_patterns(cls, *patterns: str) -> "ClassNameFilter":
        return cls(patterns, include=False)

    def apply(self, node: Node) -> FilterResult:
        class_name = _source_name(node)
        if class_name is None:
            return FilterResult.include(f"'{node.display_name}' has no source")
        match = next((p.pattern for p in self.patterns if p.fullmatch(class_name)), None)
        if self.include:
            if match is not None:
                return FilterResult.include(f"Class '{class_name}' matches '{match}'")
            return FilterResult.exclude(f"Class '{class_name}' matches no included pattern")
        if match is not None:
            return FilterResult.exclude(f"Class '{class_name}' matches excluded pattern '{match}'")
        return FilterResult.include(f"Class '{class_name}' matches no excluded pattern")


class ModuleNameFilter(Filter[Node]):
    """Includes or excludes nodes whose source lies in one of the given modules.

    A module matches itself and every module or class below it, so
    ``shop`` matches ``shop.cart.CartTests`` but not ``shopping.Tests``.
    Nodes without any source are always included.
    """

    def __init__(self, module_names: Iterable[str], include: bool):
        names = [name.strip() for name in module_names if name and name.strip()]
        if not names:
            raise PreconditionViolationError("module names must not be empty")
        self.module_names = tuple(names)
        self.include = include

    @classmethod
    def include_modules(cls, *module_names: str) -> "ModuleNameFilter":
        return cls(module_names, include=True)

    @classmethod
    def exclude_modules(cls, *module_names: str) -> "ModuleNameFilter":
        return cls(module_names, include=False)

    def _matching_module(self, source: str) -> str | None:
        return next(
            (m for m in self.module_names if source == m or source.startswith(f"{m}.")),
            None,
        )

    def apply(self, node: Node) -> FilterResult:
        source = _source_name(node)
        if source is None:
            return FilterResult.include(f"'{node.display_name}' has no source")
        module = self._matching_module(source)
        if self.include:
            if module is not None:
                return FilterResult.include(f"'{source}' is in included module '{module}'")
            return FilterResult.exclude(f"'{source}' is in no included module")
        if module is not None:
            return FilterResult.exclude(f"'{source}' is in excluded module '{module}'")
        return FilterResult.include(f"'{source}' is in no excluded module")


__all__ = [
    "ClassNameFilter",
    "CompositeFilter",
    "DisplayNameFilter",
    "EngineFilter",
    "Filter",
    "FilterResult",
    "ModuleNameFilter",
    "TagFilter",
    "compose_filters",
]
