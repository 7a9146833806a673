"""
Versioned SQL migrations for the invoice database.

Migration files live next to this module as ``vNNN_name.sql``. Each applied
file is recorded in ``schema_migrations`` with a checksum; a bundled file
whose checksum no longer matches its recorded one blocks the run, since the
status ledger triggers must never silently change shape. An existing
database is copied aside first and restored if any migration fails.
"""

import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from facturation.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

_FILENAME_RE = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = (
    "clients",
    "invoices",
    "line_items",
    "invoice_status_history",
    "schema_migrations",
)

LEDGER_TRIGGERS = (
    "trg_status_history_no_update",
    "trg_status_history_no_delete",
)


@dataclass(frozen=True)
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME_RE.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        digest = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=digest)

    @property
    def label(self) -> str:
        return f"v{self.version}_{self.name}"


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksums."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        # schema_migrations does not exist before v001
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def discover_migrations() -> list[MigrationInfo]:
    """Bundled migration files, oldest first."""
    found = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return found


def plan_migrations(
    applied: dict[str, str],
    bundled: list[MigrationInfo],
) -> tuple[list[MigrationInfo], list[MigrationInfo]]:
    """
    Split bundled migrations into pending and drifted ones.

    A migration has drifted when it was applied under a different checksum.
    """
    pending = [m for m in bundled if m.version not in applied]
    drifted = [
        m for m in bundled if m.version in applied and applied[m.version] != m.checksum
    ]
    return pending, drifted


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration script and record it in ``schema_migrations``."""
    logger.info("applying_migration", migration=migration.label)
    start = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)"
            " VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, _elapsed_ms(start)),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", migration=migration.label, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=_elapsed_ms(start),
            error=str(e),
        )

    elapsed = _elapsed_ms(start)
    logger.info("migration_applied", migration=migration.label, execution_time_ms=elapsed)
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside and return the copy's path."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def _foreign_key_violations(conn: aiosqlite.Connection) -> int:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    return len(await cursor.fetchall())


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest bundled migration.

    Stops at the first failing migration. Drifted checksums abort the run
    before anything is applied.

    Args:
        db_path: Database file, defaults to the configured one
        create_backup_before: Copy an existing file aside before migrating

    Returns:
        One result per migration attempted; empty when already current
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            pending, drifted = plan_migrations(
                await get_applied_migrations(conn), discover_migrations()
            )
            if drifted:
                logger.error(
                    "migration_checksum_mismatch",
                    migrations=[m.label for m in drifted],
                )
                pending = []

            for migration in pending:
                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break

            violations = await _foreign_key_violations(conn) if results else 0
            if violations:
                logger.error("foreign_key_violations_after_migration", count=violations)
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None:
        if any(not r.success for r in results):
            restore_backup(db_path, backup_path)
        else:
            backup_path.unlink()

    return results


# Name used by the application lifespan
run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Current version with applied and pending migration versions."""
    db_path = db_path or get_settings().storage.db_path
    bundled = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in bundled],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    pending, drifted = plan_migrations(applied, bundled)
    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in pending],
        "drifted_migrations": [m.version for m in drifted],
        "total_migrations": len(bundled),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """SQLite integrity, foreign keys, required tables and ledger triggers."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        violations = await _foreign_key_violations(conn)

        cursor = await conn.execute("PRAGMA integrity_check")
        (integrity,) = await cursor.fetchone()

        cursor = await conn.execute(
            "SELECT type, name FROM sqlite_master WHERE type IN ('table', 'trigger')"
        )
        existing = set(await cursor.fetchall())

    missing_tables = [t for t in REQUIRED_TABLES if ("table", t) not in existing]
    missing_triggers = [t for t in LEDGER_TRIGGERS if ("trigger", t) not in existing]

    def verdict(ok: bool) -> str:
        return "PASS" if ok else "FAIL"

    return [
        {"check": "foreign_keys", "status": verdict(violations == 0), "violations": violations},
        {"check": "integrity", "status": verdict(integrity == "ok"), "result": integrity},
        {
            "check": "required_tables",
            "status": verdict(not missing_tables),
            "missing": missing_tables,
        },
        {
            "check": "ledger_append_only",
            "status": verdict(not missing_triggers),
            "missing": missing_triggers,
        },
    ]


async def _run_cli(args) -> int:
    if args.status:
        status = await get_migration_status(args.db_path)
        print(f"Database:  {'present' if status['exists'] else 'missing'}")
        print(f"Version:   {status['current_version'] or '-'}")
        print(f"Pending:   {', '.join(status['pending_migrations']) or 'none'}")
        if status.get("drifted_migrations"):
            print(f"Drifted:   {', '.join(status['drifted_migrations'])}")
        return 0

    if args.verify:
        failed = 0
        for check in await verify_schema_integrity(args.db_path):
            print(f"[{check['status']}] {check['check']}")
            if check["status"] != "PASS":
                failed += 1
                for key, value in check.items():
                    if key not in ("check", "status"):
                        print(f"       {key}: {value}")
        return 1 if failed else 0

    results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
    if not results:
        print("Database is up to date")
    for result in results:
        mark = "OK" if result.success else "FAILED"
        print(f"[{mark}] v{result.version}_{result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"       {result.error}")
    return 0 if all(r.success for r in results) else 1


def main() -> None:
    """``facturation-migrate`` entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Facturation database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show migration status")
    parser.add_argument("--verify", action="store_true", help="Verify schema integrity")
    parser.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")

    raise SystemExit(asyncio.run(_run_cli(parser.parse_args())))


if __name__ == "__main__":
    main()
