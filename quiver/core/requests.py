"""Request values flowing into engines.

A DiscoveryRequest is supplied once by the caller and never mutated by
the launcher. RootedRequest pairs it with an optional suite node, and
ExecutionRequest carries one engine's root node into execution.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeVar

from .errors import PreconditionViolationError, require_not_none
from .filters import EngineFilter, Filter
from .models import Node, UniqueId

if TYPE_CHECKING:
    from .ports import EngineExecutionListener, TestEnginePort

S = TypeVar("S", bound="DiscoverySelector")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


# ============================================================================
# SELECTORS
# ============================================================================


class DiscoverySelector:
    """Marker base class for everything a request can select."""


@dataclass(frozen=True)
class ClassSelector(DiscoverySelector):
    """Selects a class by its dotted import path (``pkg.module.Class``)."""

    class_name: str

    def __post_init__(self) -> None:
        if not self.class_name or not self.class_name.strip():
            raise PreconditionViolationError("class_name must be a non-empty string")

    @property
    def module_name(self) -> str:
        return self.class_name.rpartition(".")[0]

    @property
    def simple_name(self) -> str:
        return self.class_name.rpartition(".")[2]


@dataclass(frozen=True)
class ModuleSelector(DiscoverySelector):
    """Selects every discoverable unit in a module or package."""

    module_name: str

    def __post_init__(self) -> None:
        if not self.module_name or not self.module_name.strip():
            raise PreconditionViolationError("module_name must be a non-empty string")


@dataclass(frozen=True)
class MethodSelector(DiscoverySelector):
    """Selects one method of a class."""

    class_name: str
    method_name: str

    def __post_init__(self) -> None:
        if not self.class_name or not self.class_name.strip():
            raise PreconditionViolationError("class_name must be a non-empty string")
        if not self.method_name or not self.method_name.strip():
            raise PreconditionViolationError("method_name must be a non-empty string")


@dataclass(frozen=True)
class UniqueIdSelector(DiscoverySelector):
    """Selects a node by its unique ID."""

    unique_id: UniqueId


def select_class(class_name: str | type) -> ClassSelector:
    if isinstance(class_name, type):
        class_name = f"{class_name.__module__}.{class_name.__qualname__}"
    return ClassSelector(class_name)


def select_module(module_name: str) -> ModuleSelector:
    return ModuleSelector(module_name)


def select_method(class_name: str | type, method_name: str) -> MethodSelector:
    if isinstance(class_name, type):
        class_name = f"{class_name.__module__}.{class_name.__qualname__}"
    return MethodSelector(class_name, method_name)


def select_unique_id(unique_id: str | UniqueId) -> UniqueIdSelector:
    if isinstance(unique_id, str):
        unique_id = UniqueId.parse(unique_id)
    return UniqueIdSelector(unique_id)


# ============================================================================
# CONFIGURATION PARAMETERS
# ============================================================================


class ConfigurationParameters:
    """Read-only string parameters handed to engines.

    Explicit values win over defaults. Defaults usually come from the
    ``configuration_parameters`` setting.
    """

    def __init__(
        self,
        explicit: Mapping[str, str] | None = None,
        defaults: Mapping[str, str] | None = None,
    ):
        self._explicit = MappingProxyType(dict(explicit or {}))
        self._defaults = MappingProxyType(dict(defaults or {}))

    def get(self, key: str, default: str | None = None) -> str | None:
        if not key or not key.strip():
            raise PreconditionViolationError("key must be a non-empty string")
        if key in self._explicit:
            return self._explicit[key]
        return self._defaults.get(key, default)

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """Parse a parameter as a boolean (true/false, 1/0, yes/no, on/off)."""
        value = self.get(key)
        if value is None:
            return default
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise PreconditionViolationError(
            f"configuration parameter '{key}' is not a boolean: {value!r}"
        )

    def keys(self) -> set[str]:
        return set(self._defaults) | set(self._explicit)

    def as_dict(self) -> dict[str, str]:
        return {**self._defaults, **self._explicit}

    def __contains__(self, key: object) -> bool:
        return key in self._explicit or key in self._defaults

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.keys()))

    def __len__(self) -> int:
        return len(self.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigurationParameters):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    def __hash__(self) -> int:
        return hash(frozenset(self.as_dict().items()))

    def __repr__(self) -> str:
        return f"ConfigurationParameters({self.as_dict()!r})"


# ============================================================================
# REQUESTS
# ============================================================================


@dataclass(frozen=True)
class DiscoveryRequest:
    """What to discover: selectors plus engine and post-discovery filters."""

    selectors: tuple[DiscoverySelector, ...] = ()
    engine_filters: tuple[Filter["TestEnginePort"], ...] = ()
    post_discovery_filters: tuple[Filter[Node], ...] = ()
    configuration_parameters: ConfigurationParameters = field(
        default_factory=ConfigurationParameters
    )

    def __post_init__(self) -> None:
        """Store every sequence field as a tuple."""
        object.__setattr__(self, "selectors", tuple(self.selectors))
        object.__setattr__(self, "engine_filters", tuple(self.engine_filters))
        object.__setattr__(self, "post_discovery_filters", tuple(self.post_discovery_filters))

    def selectors_of(self, kind: type[S]) -> list[S]:
        """Return the selectors that are instances of kind, in order."""
        return [selector for selector in self.selectors if isinstance(selector, kind)]


class DiscoveryRequestBuilder:
    """Fluent builder for DiscoveryRequest.

    Example:
        request = (
            DiscoveryRequestBuilder()
            .select(select_class("tests.test_cart.CartTests"))
            .filter_engines(EngineFilter.include_engines("unit"))
            .filter_nodes(TagFilter.exclude_tags("slow"))
            .configuration_parameter("unit.parallel", "false")
            .build()
        )
    """

    def __init__(self, defaults: Mapping[str, str] | None = None):
        self._selectors: list[DiscoverySelector] = []
        self._engine_filters: list[Filter["TestEnginePort"]] = []
        self._post_discovery_filters: list[Filter[Node]] = []
        self._parameters: dict[str, str] = {}
        self._defaults = dict(defaults or {})

    def select(self, *selectors: DiscoverySelector) -> "DiscoveryRequestBuilder":
        for selector in selectors:
            require_not_none(selector, "selectors must not contain None")
            self._selectors.append(selector)
        return self

    def filter_engines(self, *filters: Filter["TestEnginePort"]) -> "DiscoveryRequestBuilder":
        for engine_filter in filters:
            require_not_none(engine_filter, "engine filters must not contain None")
            self._engine_filters.append(engine_filter)
        return self

    def filter_nodes(self, *filters: Filter[Node]) -> "DiscoveryRequestBuilder":
        for node_filter in filters:
            require_not_none(node_filter, "post-discovery filters must not contain None")
            self._post_discovery_filters.append(node_filter)
        return self

    def configuration_parameter(self, key: str, value: str) -> "DiscoveryRequestBuilder":
        if not key or not key.strip():
            raise PreconditionViolationError("configuration parameter key must not be blank")
        self._parameters[key] = value
        return self

    def configuration_parameters(self, values: Mapping[str, str]) -> "DiscoveryRequestBuilder":
        for key, value in values.items():
            self.configuration_parameter(key, value)
        return self

    def build(self) -> DiscoveryRequest:
        return DiscoveryRequest(
            selectors=tuple(self._selectors),
            engine_filters=tuple(self._engine_filters),
            post_discovery_filters=tuple(self._post_discovery_filters),
            configuration_parameters=ConfigurationParameters(self._parameters, self._defaults),
        )


def build_request(
    selectors: Iterable[DiscoverySelector] = (),
    engine_filters: Iterable[EngineFilter] = (),
    post_discovery_filters: Iterable[Filter[Node]] = (),
) -> DiscoveryRequest:
    """Shorthand for a request without configuration parameters."""
    return (
        DiscoveryRequestBuilder()
        .select(*selectors)
        .filter_engines(*engine_filters)
        .filter_nodes(*post_discovery_filters)
        .build()
    )


@dataclass(frozen=True)
class RootedRequest:
    """A discovery request paired with an optional suite root node."""

    request: DiscoveryRequest
    suite_node: Node | None = None


@dataclass(frozen=True)
class ExecutionRequest:
    """Everything one engine needs to execute its discovered tree."""

    root_node: Node
    listener: "EngineExecutionListener"
    configuration_parameters: ConfigurationParameters


__all__ = [
    "ClassSelector",
    "ConfigurationParameters",
    "DiscoveryRequest",
    "DiscoveryRequestBuilder",
    "DiscoverySelector",
    "ExecutionRequest",
    "MethodSelector",
    "ModuleSelector",
    "RootedRequest",
    "UniqueIdSelector",
    "build_request",
    "select_class",
    "select_method",
    "select_module",
    "select_unique_id",
]
