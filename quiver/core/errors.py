"""Exception hierarchy and precondition helpers for the launcher core.

Two failure classes exist:

- Plugin failures: an engine raises while discovering or executing.
  These are contained at the launcher boundary, logged, and the run
  continues without that engine.
- Contract violations: a caller or plugin breaks the API contract
  (None request, duplicate engine IDs, a None discovery root).
  These raise immediately.
"""

from collections.abc import Iterable
from typing import Any


class QuiverError(Exception):
    """Base class for all errors raised by the launcher core."""


class PreconditionViolationError(QuiverError, ValueError):
    """A caller violated the documented contract of an operation."""


class LauncherError(QuiverError):
    """The launcher could not be constructed from the supplied engines."""


class EngineContractViolation(PreconditionViolationError):
    """An engine broke the engine contract (e.g. returned no root node)."""

    def __init__(self, engine_id: str, message: str):
        super().__init__(message)
        self.engine_id = engine_id


# Conditions that must never be swallowed by a failure boundary.
# KeyboardInterrupt and SystemExit are not Exception subclasses and are
# therefore never caught in the first place.
UNRECOVERABLE_ERRORS: tuple[type[BaseException], ...] = (MemoryError,)


def rethrow_if_unrecoverable(error: BaseException) -> None:
    """Re-raise the error if it belongs to the unrecoverable set."""
    if isinstance(error, UNRECOVERABLE_ERRORS):
        raise error


def require_not_none(value: Any, message: str) -> Any:
    """Return value, or raise PreconditionViolationError if it is None."""
    if value is None:
        raise PreconditionViolationError(message)
    return value


def require_not_empty(values: Iterable[Any] | None, message: str) -> list[Any]:
    """Return values as a list, raising if None or empty."""
    if values is None:
        raise PreconditionViolationError(message)
    items = list(values)
    if not items:
        raise PreconditionViolationError(message)
    return items


def require_no_none_elements(values: Iterable[Any], message: str) -> list[Any]:
    """Return values as a list, raising if any element is None."""
    items = list(values)
    if any(item is None for item in items):
        raise PreconditionViolationError(message)
    return items


__all__ = [
    "EngineContractViolation",
    "LauncherError",
    "PreconditionViolationError",
    "QuiverError",
    "UNRECOVERABLE_ERRORS",
    "rethrow_if_unrecoverable",
    "require_no_none_elements",
    "require_not_empty",
    "require_not_none",
]
