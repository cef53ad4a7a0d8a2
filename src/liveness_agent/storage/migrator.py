"""SQL migration runner.

Applies every ``*.sql`` file in a directory, in lexicographic filename order,
each as one script. Stops at the first failure; nothing is rolled back and no
applied-migration table is kept, so scripts must be idempotent.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path

logger = logging.getLogger(__name__)


class MigrationError(Exception):
    """Raised when a migration file cannot be read or executed."""


def discover_migrations(migration_dir: Path | str) -> list[Path]:
    """Return the ``*.sql`` files of a directory, sorted by name."""
    directory = Path(migration_dir)
    if not directory.is_dir():
        raise MigrationError(f"failed to read migration directory: {directory}")
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix == ".sql"),
        key=lambda p: p.name,
    )


def run_migrations(db_path: Path | str, migration_dir: Path | str) -> list[str]:
    """Apply all migrations to the database and return the applied file names."""
    files = discover_migrations(migration_dir)
    if not files:
        logger.info("No migration files found in %s", migration_dir)
        return []

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    applied: list[str] = []
    with closing(sqlite3.connect(str(db_path))) as conn:
        for path in files:
            logger.info("Running migration %s", path.name)
            try:
                script = path.read_text(encoding="utf-8")
            except OSError as e:
                raise MigrationError(f"failed to read migration file {path.name}: {e}") from e
            try:
                conn.executescript(script)
            except sqlite3.Error as e:
                raise MigrationError(f"failed to execute migration {path.name}: {e}") from e
            applied.append(path.name)
            logger.info("Migration completed %s", path.name)

    logger.info("Migrations completed: %d applied", len(applied))
    return applied
