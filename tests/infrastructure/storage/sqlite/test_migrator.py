"""Unit tests for database migrator."""

from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

import facturation.infrastructure.storage.sqlite.migrations.migrator as migrator_module
from facturation.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    plan_migrations,
    restore_backup,
    verify_schema_integrity,
)


@pytest.fixture
def patched_settings(mock_settings):
    with patch.object(migrator_module, "get_settings", return_value=mock_settings):
        yield mock_settings


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("-- Test migration\nSELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial_schema"
        assert len(info.checksum) == 16

    def test_invalid_filename(self, tmp_path: Path):
        bad = tmp_path / "initial.sql"
        bad.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(bad)


class TestDiscoverMigrations:
    def test_bundled_migrations_in_order(self):
        versions = [m.version for m in discover_migrations()]

        assert versions == sorted(versions)
        assert versions[:2] == ["001", "002"]


class TestPlanMigrations:
    def _info(self, version: str, checksum: str) -> MigrationInfo:
        return MigrationInfo(
            version=version, name="m", path=Path(f"v{version}_m.sql"), checksum=checksum
        )

    def test_pending_and_drifted(self):
        bundled = [self._info("001", "aaa"), self._info("002", "bbb"), self._info("003", "ccc")]

        pending, drifted = plan_migrations({"001": "aaa", "002": "zzz"}, bundled)

        assert [m.version for m in pending] == ["003"]
        assert [m.version for m in drifted] == ["002"]

    def test_fresh_database_runs_everything(self):
        bundled = [self._info("001", "aaa")]

        assert plan_migrations({}, bundled) == (bundled, [])


class TestInitializeDatabase:
    async def test_fresh_database(self, temp_db_path: Path, patched_settings):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert [r.version for r in results] == ["001", "002"]
        assert all(r.success for r in results)

        async with aiosqlite.connect(temp_db_path) as conn:
            assert await get_current_version(conn) == "002"
            assert set(await get_applied_migrations(conn)) == {"001", "002"}

    async def test_second_run_is_noop(self, temp_db_path: Path, patched_settings):
        await initialize_database(temp_db_path, create_backup_before=False)

        assert await initialize_database(temp_db_path) == []
        assert list(temp_db_path.parent.glob("*.backup_*")) == []

    async def test_status_and_integrity(self, temp_db_path: Path, patched_settings):
        before = await get_migration_status(temp_db_path)
        assert before["exists"] is False
        assert before["pending_migrations"] == ["001", "002"]

        await initialize_database(temp_db_path, create_backup_before=False)

        after = await get_migration_status(temp_db_path)
        assert after["current_version"] == "002"
        assert after["pending_migrations"] == []

        checks = await verify_schema_integrity(temp_db_path)
        assert {c["check"]: c["status"] for c in checks} == {
            "foreign_keys": "PASS",
            "integrity": "PASS",
            "required_tables": "PASS",
            "ledger_append_only": "PASS",
        }

    async def test_drifted_checksum_blocks_run(self, temp_db_path: Path, patched_settings):
        await initialize_database(temp_db_path, create_backup_before=False)
        async with aiosqlite.connect(temp_db_path) as conn:
            await conn.execute("DELETE FROM schema_migrations WHERE version = '002'")
            await conn.execute("UPDATE schema_migrations SET checksum = 'tampered'")
            await conn.commit()

        assert await initialize_database(temp_db_path, create_backup_before=False) == []

        status = await get_migration_status(temp_db_path)
        assert status["drifted_migrations"] == ["001"]
        assert status["pending_migrations"] == ["002"]


class TestBackup:
    def test_backup_and_restore(self, tmp_path: Path):
        db = tmp_path / "app.db"
        db.write_bytes(b"original")

        backup = create_backup(db)
        db.write_bytes(b"changed")
        restore_backup(db, backup)

        assert db.read_bytes() == b"original"
