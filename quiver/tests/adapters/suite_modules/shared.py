from quiver.adapters.suites import suite


@suite(select_classes=["pkg.Shared"])
class SharedSuite:
    pass
