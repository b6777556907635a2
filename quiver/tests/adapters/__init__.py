"""Tests for concrete adapters."""
