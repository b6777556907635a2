"""Composition root for the Quiver test launcher.

This module wires the core launcher to concrete adapter
implementations and to the engines installed in the environment.

Module Structure:
- Configuration loading via config module
- Logging configuration
- Engine and listener loading from entry points
- Launcher construction
"""

import logging
import sys
from collections.abc import Iterable
from importlib.metadata import EntryPoint, entry_points
from typing import Any, TypeVar

from quiver.adapters.suites.decorated import DecoratedSuiteResolver
from quiver.config import Settings, load_settings
from quiver.core.errors import LauncherError
from quiver.core.launcher import Launcher
from quiver.core.ports import ExecutionListener, SuiteResolverPort, TestEnginePort
from quiver.core.requests import DiscoveryRequestBuilder

logger = logging.getLogger(__name__)

P = TypeVar("P")


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure launcher logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def _instantiate(entry_point: EntryPoint, port: type[P]) -> P:
    """Load an entry point and turn it into an instance of port.

    The entry point may name a class (instantiated without arguments)
    or an already constructed instance.
    """
    try:
        target: Any = entry_point.load()
        instance = target() if isinstance(target, type) else target
    except Exception as e:
        raise LauncherError(
            f"Failed to load entry point '{entry_point.name}' ({entry_point.value}): {e}"
        ) from e
    if not isinstance(instance, port):
        raise LauncherError(
            f"Entry point '{entry_point.name}' ({entry_point.value}) does not provide "
            f"a {port.__name__}"
        )
    return instance


def load_engines(group: str) -> list[TestEnginePort]:
    """Instantiate every engine registered under the entry point group."""
    engines = [_instantiate(ep, TestEnginePort) for ep in entry_points(group=group)]
    logger.info(f"Loaded {len(engines)} engine(s) from entry point group '{group}'")
    return engines


def load_listeners(group: str) -> list[ExecutionListener]:
    """Instantiate every listener registered under the entry point group."""
    listeners = [_instantiate(ep, ExecutionListener) for ep in entry_points(group=group)]
    logger.info(f"Loaded {len(listeners)} listener(s) from entry point group '{group}'")
    return listeners


def create_launcher(
    settings: Settings | None = None,
    engines: Iterable[TestEnginePort] | None = None,
    listeners: Iterable[ExecutionListener] = (),
    suite_resolver: SuiteResolverPort | None = None,
) -> Launcher:
    """Build a launcher wired from settings.

    Steps:
    1. Load configuration from environment (if not supplied)
    2. Load engines from entry points (if not supplied)
    3. Construct the launcher with the suite resolver
    4. Register explicit listeners, then entry point listeners

    Raises:
        LauncherError: If no engine is available, engine IDs collide, or
            an entry point cannot be loaded.
    """
    settings = settings or load_settings()

    if engines is None:
        engines = load_engines(settings.engine_entry_point_group)

    launcher = Launcher(
        engines,
        suite_resolver=suite_resolver or DecoratedSuiteResolver(),
        strict_engine_contracts=settings.strict_engine_contracts,
    )
    logger.info(
        f"Launcher initialized with engines: "
        f"{', '.join(engine.engine_id for engine in launcher.engines)}"
    )

    to_register = list(listeners)
    if settings.auto_register_listeners:
        to_register.extend(load_listeners(settings.listener_entry_point_group))
    if to_register:
        launcher.register_listeners(*to_register)

    return launcher


def request_builder(settings: Settings | None = None) -> DiscoveryRequestBuilder:
    """Return a request builder seeded with the configured default parameters."""
    settings = settings or load_settings()
    return DiscoveryRequestBuilder(defaults=settings.configuration_parameters)


__all__ = [
    "configure_logging",
    "create_launcher",
    "load_engines",
    "load_listeners",
    "request_builder",
]
