"""Decorator-based suites.

A suite is a plain class marked with ``@suite``. The decorator records
which classes and modules the suite selects, and which tags, engines,
class names and modules it includes or excludes:

    @suite(
        select_classes=["shop.tests.CartTests", "shop.tests.CheckoutTests"],
        exclude_tags=["slow"],
    )
    class ShopSuite:
        pass

DecoratedSuiteResolver implements SuiteResolverPort by importing the
class or module behind a selector and reading the declarations found there.
"""

import importlib
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from quiver.core.errors import rethrow_if_unrecoverable
from quiver.core.filters import (
    ClassNameFilter,
    EngineFilter,
    Filter,
    ModuleNameFilter,
    TagFilter,
)
from quiver.core.models import Node
from quiver.core.ports import SuiteDeclaration, SuiteResolverPort, TestEnginePort
from quiver.core.requests import (
    ClassSelector,
    DiscoverySelector,
    ModuleSelector,
    select_class,
    select_module,
)

logger = logging.getLogger(__name__)

SUITE_ATTRIBUTE = "__quiver_suite__"

C = TypeVar("C", bound=type)


def suite(
    select_classes: Iterable[str | type] = (),
    select_modules: Iterable[str] = (),
    include_tags: Iterable[str] = (),
    exclude_tags: Iterable[str] = (),
    include_engines: Iterable[str] = (),
    exclude_engines: Iterable[str] = (),
    include_class_name_patterns: Iterable[str] = (),
    exclude_class_name_patterns: Iterable[str] = (),
    include_modules: Iterable[str] = (),
    exclude_modules: Iterable[str] = (),
    display_name: str | None = None,
) -> Callable[[C], C]:
    """Mark a class as a suite.

    Class name patterns are regular expressions matched against the full
    dotted name of the class a node belongs to. Module filters match a
    module and everything below it.

    Raises:
        ValueError: If the suite selects nothing, or if applied to
            something that is not a class.
    """
    selectors: list[DiscoverySelector] = [select_class(c) for c in select_classes]
    selectors.extend(select_module(m) for m in select_modules)
    if not selectors:
        raise ValueError("a suite must select at least one class or module")

    engine_filters: list[Filter[TestEnginePort]] = []
    if include_engines:
        engine_filters.append(EngineFilter.include_engines(*include_engines))
    if exclude_engines:
        engine_filters.append(EngineFilter.exclude_engines(*exclude_engines))

    node_filters: list[Filter[Node]] = []
    if include_tags:
        node_filters.append(TagFilter.include_tags(*include_tags))
    if exclude_tags:
        node_filters.append(TagFilter.exclude_tags(*exclude_tags))
    if include_class_name_patterns:
        node_filters.append(ClassNameFilter.include_patterns(*include_class_name_patterns))
    if exclude_class_name_patterns:
        node_filters.append(ClassNameFilter.exclude_patterns(*exclude_class_name_patterns))
    if include_modules:
        node_filters.append(ModuleNameFilter.include_modules(*include_modules))
    if exclude_modules:
        node_filters.append(ModuleNameFilter.exclude_modules(*exclude_modules))

    def decorate(cls: C) -> C:
        if not isinstance(cls, type):
            raise ValueError(f"@suite can only decorate classes, got {cls!r}")
        name = f"{cls.__module__}.{cls.__qualname__}"
        declaration = SuiteDeclaration(
            name=name,
            display_name=display_name or cls.__name__,
            selectors=tuple(selectors),
            engine_filters=tuple(engine_filters),
            post_discovery_filters=tuple(node_filters),
        )
        setattr(cls, SUITE_ATTRIBUTE, declaration)
        return cls

    return decorate


class DecoratedSuiteResolver(SuiteResolverPort):
    """Finds ``@suite`` classes behind class and module selectors.

    A class selector reaches the selected class if it is a suite. A module
    selector reaches every suite class defined at the top level of that
    module (classes imported into it are skipped). A module that fails to
    import is logged and reaches no suite; its selector still goes to the
    engines unchanged.
    """

    def __init__(self) -> None:
        self._class_cache: dict[str, SuiteDeclaration | None] = {}
        self._module_cache: dict[str, list[SuiteDeclaration]] = {}

    def suites_for(self, selector: DiscoverySelector) -> list[SuiteDeclaration]:
        if isinstance(selector, ClassSelector):
            declaration = self._class_suite(selector.class_name)
            return [declaration] if declaration is not None else []
        if isinstance(selector, ModuleSelector):
            return list(self._module_suites(selector.module_name))
        return []

    def _class_suite(self, class_name: str) -> SuiteDeclaration | None:
        if class_name not in self._class_cache:
            cls = _import_class(class_name)
            self._class_cache[class_name] = _declaration_of(cls) if cls is not None else None
        return self._class_cache[class_name]

    def _module_suites(self, module_name: str) -> list[SuiteDeclaration]:
        if module_name not in self._module_cache:
            self._module_cache[module_name] = _collect_module_suites(module_name)
        return self._module_cache[module_name]


def _declaration_of(cls: type) -> SuiteDeclaration | None:
    # Only the class itself counts; subclasses of a suite are not suites.
    declaration = vars(cls).get(SUITE_ATTRIBUTE)
    return declaration if isinstance(declaration, SuiteDeclaration) else None


def _log_broken_module(module_name: str, error: Exception) -> None:
    rethrow_if_unrecoverable(error)
    logger.warning(
        f"Module '{module_name}' failed to import ({type(error).__name__}: {error}); "
        f"not looking for suites in it.",
        exc_info=error,
    )


def _collect_module_suites(module_name: str) -> list[SuiteDeclaration]:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        logger.debug(f"Could not import module '{module_name}'; it declares no suites.")
        return []
    except Exception as e:
        _log_broken_module(module_name, e)
        return []

    declarations = []
    for value in vars(module).values():
        if isinstance(value, type) and value.__module__ == module.__name__:
            declaration = _declaration_of(value)
            if declaration is not None:
                declarations.append(declaration)
    return declarations


def _import_class(class_name: str) -> Any:
    """Import ``pkg.module.Outer.Inner``, trying the longest module path first."""
    parts = class_name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        except Exception as e:
            _log_broken_module(module_name, e)
            return None
        try:
            for attribute in parts[split:]:
                target = getattr(target, attribute)
        except AttributeError:
            break
        return target if isinstance(target, type) else None
    logger.debug(f"Could not import class '{class_name}'; not treating it as a suite.")
    return None


__all__ = ["DecoratedSuiteResolver", "SUITE_ATTRIBUTE", "suite"]
