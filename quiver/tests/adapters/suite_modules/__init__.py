"""Importable modules used by the suite resolver tests."""
