"""External adapters for the Quiver launcher.

This package provides concrete implementations of the core port
interfaces that are useful to any embedding application.

Adapter Organization:

- listeners/: ExecutionListener implementations (logging, summaries)
- suites/: SuiteResolverPort implementations (decorator-based suites)
"""
