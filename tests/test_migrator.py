"""Tests for the SQL migration runner."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from liveness_agent.storage.migrator import MigrationError, discover_migrations, run_migrations

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"


def tables(db_path: Path) -> set[str]:
    conn = sqlite3.connect(str(db_path))
    try:
        return {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    finally:
        conn.close()


@pytest.fixture
def migration_dir(tmp_path: Path) -> Path:
    d = tmp_path / "migrations"
    d.mkdir()
    return d


class TestDiscovery:
    def test_lexicographic_order(self, migration_dir: Path) -> None:
        for name in ("2_b.sql", "10_a.sql", "1_c.sql"):
            (migration_dir / name).write_text("SELECT 1;")
        assert [p.name for p in discover_migrations(migration_dir)] == ["10_a.sql", "1_c.sql", "2_b.sql"]

    def test_ignores_other_files(self, migration_dir: Path) -> None:
        (migration_dir / "001.sql").write_text("SELECT 1;")
        (migration_dir / "README.md").write_text("notes")
        (migration_dir / "002.sql.bak").write_text("SELECT 1;")
        (migration_dir / "nested.sql").mkdir()
        assert [p.name for p in discover_migrations(migration_dir)] == ["001.sql"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(MigrationError, match="failed to read migration directory"):
            discover_migrations(tmp_path / "nope")


class TestRunMigrations:
    def test_applies_in_name_order(self, tmp_path: Path, migration_dir: Path) -> None:
        # "10_" sorts before "2_" so the table exists when rows are inserted
        (migration_dir / "10_create.sql").write_text("CREATE TABLE items (name TEXT);")
        (migration_dir / "2_insert.sql").write_text("INSERT INTO items VALUES ('a'); INSERT INTO items VALUES ('b');")

        db = tmp_path / "db" / "agent.db"
        applied = run_migrations(db, migration_dir)

        assert applied == ["10_create.sql", "2_insert.sql"]
        conn = sqlite3.connect(str(db))
        try:
            assert conn.execute("SELECT COUNT(*) FROM items").fetchone()[0] == 2
        finally:
            conn.close()

    def test_fails_fast(self, tmp_path: Path, migration_dir: Path) -> None:
        (migration_dir / "001_ok.sql").write_text("CREATE TABLE one (id INTEGER);")
        (migration_dir / "002_bad.sql").write_text("CREATE TABLE oops (;")
        (migration_dir / "003_never.sql").write_text("CREATE TABLE three (id INTEGER);")

        db = tmp_path / "agent.db"
        with pytest.raises(MigrationError, match="002_bad.sql"):
            run_migrations(db, migration_dir)

        assert "one" in tables(db)
        assert "three" not in tables(db)

    def test_empty_directory(self, tmp_path: Path, migration_dir: Path) -> None:
        assert run_migrations(tmp_path / "agent.db", migration_dir) == []

    def test_repository_migrations_are_rerunnable(self, tmp_path: Path) -> None:
        db = tmp_path / "agent.db"
        first = run_migrations(db, MIGRATIONS_DIR)
        second = run_migrations(db, MIGRATIONS_DIR)

        assert first == second
        assert {"health_calls", "manager_checks"} <= tables(db)
