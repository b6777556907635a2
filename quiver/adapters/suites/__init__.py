"""Suite resolvers recognizing suites among discovery selectors."""

from .decorated import SUITE_ATTRIBUTE, DecoratedSuiteResolver, suite

__all__ = ["DecoratedSuiteResolver", "SUITE_ATTRIBUTE", "suite"]
