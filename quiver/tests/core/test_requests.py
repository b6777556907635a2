"""Unit tests for selectors, configuration parameters and request building."""

import pytest

from quiver.core.errors import PreconditionViolationError
from quiver.core.filters import EngineFilter, TagFilter
from quiver.core.models import UniqueId
from quiver.core.requests import (
    ClassSelector,
    ConfigurationParameters,
    DiscoveryRequest,
    DiscoveryRequestBuilder,
    MethodSelector,
    ModuleSelector,
    UniqueIdSelector,
    select_class,
    select_method,
    select_module,
    select_unique_id,
)


class SelectedByType:
    pass


class TestSelectors:
    def test_select_class_from_type(self) -> None:
        selector = select_class(SelectedByType)
        assert selector.class_name == f"{__name__}.SelectedByType"
        assert selector.simple_name == "SelectedByType"
        assert selector.module_name == __name__

    def test_select_method(self) -> None:
        selector = select_method("pkg.Foo", "test_a")
        assert selector == MethodSelector("pkg.Foo", "test_a")

    def test_select_unique_id_parses_text(self) -> None:
        selector = select_unique_id("[engine:alpha]/[class:pkg.Foo]")
        assert selector.unique_id == UniqueId.for_engine("alpha").append("class", "pkg.Foo")

    def test_blank_names_rejected(self) -> None:
        with pytest.raises(PreconditionViolationError):
            ClassSelector(" ")
        with pytest.raises(PreconditionViolationError):
            select_module("")


class TestConfigurationParameters:
    def test_explicit_values_win_over_defaults(self) -> None:
        parameters = ConfigurationParameters({"a": "1"}, defaults={"a": "0", "b": "2"})
        assert parameters.get("a") == "1"
        assert parameters.get("b") == "2"
        assert parameters.get("c") is None
        assert parameters.get("c", "fallback") == "fallback"
        assert len(parameters) == 2
        assert list(parameters) == ["a", "b"]

    def test_get_bool(self) -> None:
        parameters = ConfigurationParameters({"on": "Yes", "off": "0", "bad": "maybe"})
        assert parameters.get_bool("on") is True
        assert parameters.get_bool("off") is False
        assert parameters.get_bool("missing", default=True) is True
        with pytest.raises(PreconditionViolationError):
            parameters.get_bool("bad")

    def test_blank_key_rejected(self) -> None:
        with pytest.raises(PreconditionViolationError):
            ConfigurationParameters().get(" ")

    def test_equality_by_effective_values(self) -> None:
        assert ConfigurationParameters({"a": "1"}) == ConfigurationParameters(defaults={"a": "1"})


class TestDiscoveryRequestBuilder:
    def test_build_preserves_order(self) -> None:
        include = EngineFilter.include_engines("alpha")
        exclude = EngineFilter.exclude_engines("beta")
        tags = TagFilter.exclude_tags("slow")
        request = (
            DiscoveryRequestBuilder(defaults={"shared": "x"})
            .select(select_class("pkg.Foo"), select_module("pkg"))
            .filter_engines(include, exclude)
            .filter_nodes(tags)
            .configuration_parameter("local", "y")
            .build()
        )
        assert request.selectors == (ClassSelector("pkg.Foo"), ModuleSelector("pkg"))
        assert request.engine_filters == (include, exclude)
        assert request.post_discovery_filters == (tags,)
        assert request.configuration_parameters.as_dict() == {"shared": "x", "local": "y"}

    def test_selectors_of_filters_by_type(self) -> None:
        request = (
            DiscoveryRequestBuilder()
            .select(select_class("pkg.Foo"), select_unique_id("[engine:a]"), select_class("pkg.Bar"))
            .build()
        )
        assert [s.class_name for s in request.selectors_of(ClassSelector)] == ["pkg.Foo", "pkg.Bar"]
        assert len(request.selectors_of(UniqueIdSelector)) == 1

    def test_none_selector_rejected(self) -> None:
        with pytest.raises(PreconditionViolationError):
            DiscoveryRequestBuilder().select(None)  # type: ignore[arg-type]

    def test_request_is_immutable(self) -> None:
        request = DiscoveryRequest()
        with pytest.raises(AttributeError):
            request.selectors = ()  # type: ignore[misc]

    def test_sequences_are_stored_as_tuples(self) -> None:
        engine_filter = EngineFilter.include_engines("alpha")
        request = DiscoveryRequest(
            selectors=[select_class("pkg.Foo")],  # type: ignore[arg-type]
            engine_filters=[engine_filter],  # type: ignore[arg-type]
            post_discovery_filters=[TagFilter.exclude_tags("slow")],  # type: ignore[arg-type]
        )

        assert request.selectors == (select_class("pkg.Foo"),)
        assert request.engine_filters == (engine_filter,)
        assert isinstance(request.post_discovery_filters, tuple)
