"""Storage subsystem: the persistence ports and their SQLite implementation."""

from .migrator import MigrationError, run_migrations
from .protocols import HealthCallStore, ManagerCheckStore, StorageError
from .sqlite import SQLiteStore

__all__ = [
    "HealthCallStore",
    "ManagerCheckStore",
    "MigrationError",
    "SQLiteStore",
    "StorageError",
    "run_migrations",
]
