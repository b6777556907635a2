"""Suites narrowing their tests by class name and module."""

from quiver.adapters.suites import suite


@suite(
    select_classes=["pkg.CartTests", "pkg.LegacyTests"],
    exclude_class_name_patterns=[r".*Legacy.*"],
)
class WithoutLegacy:
    pass


@suite(select_classes=["shop.cart.CartTests", "shopping.Tests"], include_modules=["shop"])
class ShopOnly:
    pass
