"""Fake/mock implementations of core ports for testing.

These in-memory implementations allow the launcher core to be tested
without real engines:

- FakeEngine: Builds small trees from configured class/test names
- RecordingListener: Captured lifecycle events for assertion
- FakeSuiteResolver: Suite declarations keyed by class or module name
"""

from .engine import FakeEngine
from .listener import RecordingListener
from .suite_resolver import FakeSuiteResolver

__all__ = [
    "FakeEngine",
    "FakeSuiteResolver",
    "RecordingListener",
]
