"""Unit tests for the launcher core.

These tests exercise orchestration logic without real engines.
All ports are replaced with in-memory fakes from tests/fakes/.
"""
