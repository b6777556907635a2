"""Unit tests for per-engine discovery, filtering and pruning."""

import logging

import pytest

from quiver.core.discovery import DiscoveryRunner, Phase, ResolvedResult, prune_tree
from quiver.core.errors import EngineContractViolation
from quiver.core.filters import DisplayNameFilter, EngineFilter, Filter, FilterResult, TagFilter
from quiver.core.launcher import Launcher
from quiver.core.models import Node, NodeType, UniqueId
from quiver.core.requests import RootedRequest, build_request, select_class
from quiver.tests.fakes import FakeEngine

# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def alpha() -> FakeEngine:
    return FakeEngine(
        "alpha",
        tests_by_class={"pkg.Foo": ["test_a", "test_b"], "pkg.Empty": []},
        tags={"test_a": ["fast"], "test_b": ["slow"]},
    )


@pytest.fixture
def beta() -> FakeEngine:
    return FakeEngine("beta", tests_by_class={"pkg.Bar": ["test_c"]})


@pytest.fixture
def runner(alpha: FakeEngine, beta: FakeEngine) -> DiscoveryRunner:
    return DiscoveryRunner([alpha, beta])


def _rooted(*class_names: str, **kwargs) -> RootedRequest:
    return RootedRequest(build_request([select_class(name) for name in class_names], **kwargs))


class _ExcludeEverything(Filter[Node]):
    def apply(self, element: Node) -> FilterResult:
        return FilterResult.exclude("everything is excluded")


# ============================================================================
# Engine invocation
# ============================================================================


class TestDiscoveryRunner:
    def test_engines_discovered_in_registration_order(
        self, runner: DiscoveryRunner, alpha: FakeEngine, beta: FakeEngine
    ) -> None:
        result = runner.resolve(Phase.DISCOVERY, _rooted("pkg.Foo", "pkg.Bar"))
        assert result.engines == [alpha, beta]
        assert str(result.root_for(alpha).unique_id) == "[engine:alpha]"
        assert str(result.root_for(beta).unique_id) == "[engine:beta]"

    def test_excluded_engine_is_never_called(
        self,
        runner: DiscoveryRunner,
        alpha: FakeEngine,
        beta: FakeEngine,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        rooted = _rooted("pkg.Foo", engine_filters=[EngineFilter.exclude_engines("beta")])
        with caplog.at_level(logging.DEBUG, logger="quiver.core.discovery"):
            result = runner.resolve(Phase.EXECUTION, rooted)

        assert result.engines == [alpha]
        assert beta.discover_calls == []
        assert any(
            "'beta'" in record.message and "'execution'" in record.message and "skipped" in record.message
            for record in caplog.records
        )

    def test_engine_receives_inner_request(self, runner: DiscoveryRunner, alpha: FakeEngine) -> None:
        rooted = _rooted("pkg.Foo")
        runner.resolve(Phase.DISCOVERY, rooted)
        request, unique_id = alpha.discover_calls[0]
        assert request is rooted.request
        assert unique_id == UniqueId.for_engine("alpha")

    def test_suite_root_prefixes_engine_ids_and_adopts_roots(
        self, runner: DiscoveryRunner, alpha: FakeEngine, beta: FakeEngine
    ) -> None:
        suite = Node(UniqueId.root("suite", "pkg.Suite"), "Suite")
        rooted = RootedRequest(build_request([select_class("pkg.Foo"), select_class("pkg.Bar")]), suite)

        result = runner.resolve(Phase.DISCOVERY, rooted)

        assert [str(child.unique_id) for child in suite.children] == [
            "[suite:pkg.Suite]/[engine:alpha]",
            "[suite:pkg.Suite]/[engine:beta]",
        ]
        assert result.roots == [suite]
        assert result.suite_identifier is not None
        assert result.suite_identifier.unique_id == "[suite:pkg.Suite]"

    def test_throwing_engine_is_contained(
        self,
        runner: DiscoveryRunner,
        alpha: FakeEngine,
        beta: FakeEngine,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        alpha.fail_on_discover = RuntimeError("engine exploded")

        with caplog.at_level(logging.WARNING, logger="quiver.core.discovery"):
            result = runner.resolve(Phase.DISCOVERY, _rooted("pkg.Foo", "pkg.Bar"))

        assert result.engines == [beta]
        warning = next(r for r in caplog.records if r.levelno == logging.WARNING)
        assert "'alpha'" in warning.message
        assert "discover" in warning.message
        assert warning.exc_info is not None

    def test_none_root_is_excluded_without_aborting_others(
        self,
        runner: DiscoveryRunner,
        alpha: FakeEngine,
        beta: FakeEngine,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        alpha.return_none_root = True

        with caplog.at_level(logging.ERROR, logger="quiver.core.discovery"):
            result = runner.resolve(Phase.DISCOVERY, _rooted("pkg.Foo", "pkg.Bar"))

        assert result.engines == [beta]
        assert [r.levelno for r in caplog.records] == [logging.ERROR]
        assert "must return a non-None root node" in caplog.records[0].message

    def test_none_root_raises_in_strict_mode(self, alpha: FakeEngine, beta: FakeEngine) -> None:
        alpha.return_none_root = True
        runner = DiscoveryRunner([alpha, beta], strict_engine_contracts=True)

        with pytest.raises(EngineContractViolation) as exc_info:
            runner.resolve(Phase.DISCOVERY, _rooted("pkg.Foo"))
        assert exc_info.value.engine_id == "alpha"

    def test_unrecoverable_error_is_rethrown(self, runner: DiscoveryRunner, alpha: FakeEngine) -> None:
        alpha.fail_on_discover = MemoryError()
        with pytest.raises(MemoryError):
            runner.resolve(Phase.DISCOVERY, _rooted("pkg.Foo"))

    def test_keyboard_interrupt_is_not_contained(self, runner: DiscoveryRunner, alpha: FakeEngine) -> None:
        alpha.fail_on_discover = KeyboardInterrupt()
        with pytest.raises(KeyboardInterrupt):
            runner.resolve(Phase.DISCOVERY, _rooted("pkg.Foo"))


# ============================================================================
# Post-discovery filtering and pruning
# ============================================================================


class TestFilterAndPrune:
    def test_filter_excludes_two_of_three_children_by_name(self) -> None:
        engine = FakeEngine("alpha", top_level_tests=["one", "two", "three"])
        rooted = _rooted(post_discovery_filters=[DisplayNameFilter.exclude_patterns("one", "three")])

        result = DiscoveryRunner([engine]).resolve(Phase.DISCOVERY, rooted)

        root = result.root_for(engine)
        assert [child.display_name for child in root.children] == ["two"]

        plan = Launcher([FakeEngine("alpha", top_level_tests=["one", "two", "three"])]).discover(
            build_request(post_discovery_filters=[DisplayNameFilter.exclude_patterns("one", "three")])
        )
        assert len(plan.roots) == 1
        children = plan.get_children(plan.roots[0])
        assert len(children) == 1
        assert children[0].display_name == "two"

    def test_filter_never_removes_engine_root(self) -> None:
        engine = FakeEngine("alpha")
        rooted = _rooted("pkg.Foo", post_discovery_filters=[_ExcludeEverything()])

        result = DiscoveryRunner([engine]).resolve(Phase.DISCOVERY, rooted)

        assert result.engines == [engine]
        assert result.root_for(engine).children == ()

    def test_filter_never_removes_engine_root_under_suite(self) -> None:
        engine = FakeEngine("alpha", tests_by_class={"pkg.Foo": ["test_a"]})
        suite = Node(UniqueId.root("suite", "pkg.Suite"), "Suite")
        request = build_request([select_class("pkg.Foo")], post_discovery_filters=[_ExcludeEverything()])

        result = DiscoveryRunner([engine]).resolve(Phase.DISCOVERY, RootedRequest(request, suite))

        assert suite.children == (result.root_for(engine),)
        assert result.root_for(engine).children == ()

    def test_container_emptied_by_filter_is_removed(self, alpha: FakeEngine) -> None:
        rooted = _rooted("pkg.Foo", post_discovery_filters=[TagFilter.include_tags("none")])

        result = DiscoveryRunner([alpha]).resolve(Phase.DISCOVERY, rooted)

        assert result.root_for(alpha).children == ()

    def test_tag_filter_keeps_matching_tests(self, alpha: FakeEngine) -> None:
        rooted = _rooted("pkg.Foo", post_discovery_filters=[TagFilter.exclude_tags("slow")])

        result = DiscoveryRunner([alpha]).resolve(Phase.DISCOVERY, rooted)

        container = result.root_for(alpha).children[0]
        assert [test.display_name for test in container.children] == ["test_a"]

    def test_prune_removes_empty_containers(self, alpha: FakeEngine) -> None:
        result = DiscoveryRunner([alpha]).resolve(Phase.DISCOVERY, _rooted("pkg.Foo", "pkg.Empty"))

        containers = result.root_for(alpha).children
        assert [c.display_name for c in containers] == ["Foo"]

    def test_prune_keeps_empty_engine_root(self) -> None:
        engine = FakeEngine("alpha")
        result = DiscoveryRunner([engine]).resolve(Phase.DISCOVERY, _rooted("pkg.Unknown"))
        assert result.root_for(engine).children == ()

    def test_prune_is_idempotent(self) -> None:
        root = Node(UniqueId.for_engine("alpha"), "alpha")
        empty = Node(root.unique_id.append("class", "Empty"), "Empty")
        nested = Node(empty.unique_id.append("class", "Nested"), "Nested")
        empty.add_child(nested)
        kept = Node(root.unique_id.append("class", "Kept"), "Kept")
        kept.add_child(Node(kept.unique_id.append("test", "t"), "t", NodeType.TEST))
        root.add_child(empty)
        root.add_child(kept)

        prune_tree(root)
        once = [str(node.unique_id) for node in root.walk_post_order()]
        prune_tree(root)
        twice = [str(node.unique_id) for node in root.walk_post_order()]

        assert once == twice
        assert once == [
            "[engine:alpha]/[class:Kept]/[test:t]",
            "[engine:alpha]/[class:Kept]",
            "[engine:alpha]",
        ]


class TestResolvedResult:
    def test_roots_without_suite_are_engine_roots(self, alpha: FakeEngine, beta: FakeEngine) -> None:
        result = ResolvedResult(_rooted())
        alpha_root = Node(UniqueId.for_engine("alpha"), "alpha")
        beta_root = Node(UniqueId.for_engine("beta"), "beta")
        result.add(alpha, alpha_root)
        result.add(beta, beta_root)

        assert result.roots == [alpha_root, beta_root]
        assert result.suite_identifier is None
        assert alpha_root.parent is None
