"""Test suite for the Quiver launcher.

Organized into three categories:

1. core/: Unit tests for the launcher core
   - No external dependencies, fast execution
   - Uses in-memory fakes for engines, listeners and suite resolvers

2. adapters/: Tests for concrete listeners and suite resolvers

3. fakes/: Port implementations for testing
   - In-memory implementations of TestEnginePort, ExecutionListener, etc.
   - Used by core unit tests
"""
