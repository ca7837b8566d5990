"""Test support: a pool of isolated, pre-migrated databases."""

from fortune_store.testing.pool import TestDatabasePool, database_names

__all__ = ["TestDatabasePool", "database_names"]
