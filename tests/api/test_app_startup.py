"""Tests for application startup."""

from unittest.mock import AsyncMock, patch

import pytest

from facturation.api.main import prepare_database
from facturation.core.exceptions import ConfigurationError
from facturation.infrastructure.storage.sqlite.migrations.migrator import MigrationResult

MIGRATOR = "facturation.infrastructure.storage.sqlite.migrations.migrator"


async def test_prepare_database_opens_pool_after_migrating():
    results = [MigrationResult(version="002", name="history", success=True, execution_time_ms=3)]
    get_pool = AsyncMock()

    with patch(f"{MIGRATOR}.run_migrations", AsyncMock(return_value=results)), patch(
        "facturation.infrastructure.storage.sqlite.get_pool", get_pool
    ):
        await prepare_database()

    get_pool.assert_awaited_once()


async def test_prepare_database_refuses_failed_migrations():
    results = [
        MigrationResult(
            version="002", name="history", success=False, execution_time_ms=1, error="boom"
        )
    ]
    get_pool = AsyncMock()

    with patch(f"{MIGRATOR}.run_migrations", AsyncMock(return_value=results)), patch(
        "facturation.infrastructure.storage.sqlite.get_pool", get_pool
    ):
        with pytest.raises(ConfigurationError) as exc_info:
            await prepare_database()

    assert exc_info.value.code == "MIGRATION_FAILED"
    assert exc_info.value.details == {"versions": ["002"]}
    get_pool.assert_not_awaited()
