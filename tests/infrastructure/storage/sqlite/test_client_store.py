"""Unit tests for SQLiteClientStore."""

from datetime import UTC, datetime

import pytest

from facturation.core.entities import Client, ClientStatus
from facturation.core.exceptions import ClientNotFoundError, DuplicateClientEmailError

CHANGED_AT = datetime(2024, 3, 16, 9, 0, 0, tzinfo=UTC)


class TestSQLiteClientStore:
    async def test_create_and_get(self, client_store, stored_client):
        fetched = await client_store.get_client(stored_client.id)

        assert fetched == stored_client
        assert fetched.country == "France"

    async def test_get_returns_archived_clients(self, client_store, stored_client):
        assert await client_store.archive_client(stored_client.id, CHANGED_AT)

        fetched = await client_store.get_client(stored_client.id)
        archived = await client_store.list_clients(status=ClientStatus.ARCHIVED)

        assert fetched.is_archived
        assert fetched.updated_at == CHANGED_AT
        assert [c.id for c in archived] == [stored_client.id]

    async def test_list_by_status_ordered_by_name(self, client_store):
        for name, email in (("Zèbre SARL", "z@example.com"), ("Alpha SAS", "a@example.com")):
            await client_store.create_client(Client(name=name, email=email))
        await client_store.create_client(
            Client(name="Beta", email="b@example.com", status=ClientStatus.INACTIVE)
        )

        active = await client_store.list_clients()
        everyone = await client_store.list_clients(status=None)

        assert [c.name for c in active] == ["Alpha SAS", "Zèbre SARL"]
        assert len(everyone) == 3


class TestClientEmailUniqueness:
    async def test_duplicate_ignores_case(self, client_store, stored_client):
        with pytest.raises(DuplicateClientEmailError) as exc_info:
            await client_store.create_client(Client(name="Copie", email="COMPTA@Dupont.fr"))

        assert exc_info.value.code == "DUPLICATE_EMAIL"
        assert len(await client_store.list_clients(status=None)) == 1

    async def test_archived_client_frees_email(self, client_store, stored_client):
        await client_store.archive_client(stored_client.id, CHANGED_AT)

        reborn = await client_store.create_client(
            Client(name="Dupont & Fils", email=stored_client.email)
        )

        assert reborn.id != stored_client.id

    async def test_update_to_taken_email(self, client_store, stored_client):
        other = await client_store.create_client(Client(name="Autre", email="autre@example.com"))

        with pytest.raises(DuplicateClientEmailError):
            await client_store.update_client(
                other.id, {"email": stored_client.email}, CHANGED_AT
            )

        assert (await client_store.get_client(other.id)).email == "autre@example.com"

    async def test_update_keeping_own_email(self, client_store, stored_client):
        updated = await client_store.update_client(
            stored_client.id, {"email": stored_client.email, "city": "Paris"}, CHANGED_AT
        )

        assert updated.city == "Paris"


class TestUpdateAndArchiveClient:
    async def test_update_fields(self, client_store, stored_client):
        updated = await client_store.update_client(
            stored_client.id,
            {"phone": "0472000000", "status": ClientStatus.INACTIVE, "metadata": {"k": 1}},
            CHANGED_AT,
        )

        assert updated.phone == "0472000000"
        assert updated.status == ClientStatus.INACTIVE
        assert updated.metadata == {"k": 1}
        assert updated.updated_at == CHANGED_AT
        assert updated.created_at == stored_client.created_at

    async def test_rejects_unknown_column(self, client_store, stored_client):
        with pytest.raises(ValueError):
            await client_store.update_client(stored_client.id, {"created_at": "x"}, CHANGED_AT)

    async def test_archived_client_is_read_only(self, client_store, stored_client):
        await client_store.archive_client(stored_client.id, CHANGED_AT)

        with pytest.raises(ClientNotFoundError):
            await client_store.update_client(stored_client.id, {"city": "Paris"}, CHANGED_AT)
        assert not await client_store.archive_client(stored_client.id, CHANGED_AT)

    async def test_archive_missing_client(self, client_store, initialized_db):
        assert not await client_store.archive_client(999, CHANGED_AT)
