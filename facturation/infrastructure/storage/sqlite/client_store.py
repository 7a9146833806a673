"""SQLite implementation of client storage."""

from datetime import datetime
from typing import Any

import aiosqlite

from facturation.config import get_logger
from facturation.core.entities.client import Client, ClientStatus
from facturation.core.exceptions import ClientNotFoundError, DuplicateClientEmailError
from facturation.core.interfaces.client_store import IClientStore
from facturation.infrastructure.storage.sqlite.columns import (
    dt_from_db,
    dt_to_db,
    json_from_db,
    json_to_db,
)
from facturation.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_transaction,
)

logger = get_logger(__name__)

UPDATABLE_COLUMNS = frozenset({
    "name",
    "email",
    "phone",
    "address",
    "postal_code",
    "city",
    "country",
    "company_name",
    "siret",
    "vat_number",
    "status",
    "metadata",
})


def _encode_column(column: str, value: Any) -> Any:
    if column == "metadata":
        return json_to_db(value or {})
    if column == "status" and value is not None:
        return ClientStatus(value).value
    return value


class SQLiteClientStore(IClientStore):
    """SQLite implementation of client storage."""

    async def create_client(self, client: Client) -> Client:
        async with get_transaction(immediate=True) as conn:
            if await self._email_taken(conn, client.email):
                raise DuplicateClientEmailError(client.email)

            cursor = await conn.execute(
                """
                INSERT INTO clients (
                    name, email, phone, address, postal_code, city, country,
                    company_name, siret, vat_number, status, metadata,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    client.name,
                    client.email,
                    client.phone,
                    client.address,
                    client.postal_code,
                    client.city,
                    client.country,
                    client.company_name,
                    client.siret,
                    client.vat_number,
                    client.status.value,
                    json_to_db(client.metadata),
                    dt_to_db(client.created_at),
                    dt_to_db(client.updated_at),
                ),
            )
            created = client.model_copy(update={"id": cursor.lastrowid})

        logger.info("client_created", client_id=created.id, name=created.name)
        return created

    async def get_client(self, client_id: int) -> Client | None:
        async with get_connection() as conn:
            return await self._fetch(conn, client_id)

    async def list_clients(
        self,
        status: ClientStatus | None = ClientStatus.ACTIVE,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Client]:
        async with get_connection() as conn:
            if status is None:
                cursor = await conn.execute(
                    """
                    SELECT * FROM clients
                    ORDER BY name ASC, id ASC
                    LIMIT ? OFFSET ?
                    """,
                    (limit, offset),
                )
            else:
                cursor = await conn.execute(
                    """
                    SELECT * FROM clients
                    WHERE status = ?
                    ORDER BY name ASC, id ASC
                    LIMIT ? OFFSET ?
                    """,
                    (ClientStatus(status).value, limit, offset),
                )
            rows = await cursor.fetchall()
            return [self._row_to_client(r) for r in rows]

    async def update_client(
        self, client_id: int, fields: dict[str, Any], updated_at: datetime
    ) -> Client:
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Client fields not updatable: {sorted(unknown)}")

        columns = sorted(fields)
        assignments = "".join(f"{c} = ?, " for c in columns)
        params = [_encode_column(c, fields[c]) for c in columns]

        async with get_transaction(immediate=True) as conn:
            email = fields.get("email")
            if email is not None and await self._email_taken(conn, email, client_id):
                raise DuplicateClientEmailError(email)

            cursor = await conn.execute(
                f"""
                UPDATE clients SET {assignments}updated_at = ?
                WHERE id = ? AND status != 'archived'
                """,
                (*params, dt_to_db(updated_at), client_id),
            )
            if cursor.rowcount == 0:
                raise ClientNotFoundError(client_id)
            client = await self._fetch(conn, client_id)

        logger.info("client_updated", client_id=client_id, fields=columns)
        return client  # type: ignore[return-value]

    async def archive_client(self, client_id: int, archived_at: datetime) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE clients SET status = ?, updated_at = ?
                WHERE id = ? AND status != 'archived'
                """,
                (ClientStatus.ARCHIVED.value, dt_to_db(archived_at), client_id),
            )
            archived = cursor.rowcount > 0

        if archived:
            logger.info("client_archived", client_id=client_id)
        return archived

    async def _fetch(self, conn: aiosqlite.Connection, client_id: int) -> Client | None:
        cursor = await conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,))
        row = await cursor.fetchone()
        return self._row_to_client(row) if row else None

    @staticmethod
    async def _email_taken(
        conn: aiosqlite.Connection, email: str, exclude_client_id: int | None = None
    ) -> bool:
        cursor = await conn.execute(
            """
            SELECT 1 FROM clients
            WHERE lower(email) = lower(?) AND status != 'archived' AND id != ?
            LIMIT 1
            """,
            (email, exclude_client_id if exclude_client_id is not None else -1),
        )
        return await cursor.fetchone() is not None

    @staticmethod
    def _row_to_client(row: aiosqlite.Row) -> Client:
        return Client(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            address=row["address"],
            postal_code=row["postal_code"],
            city=row["city"],
            country=row["country"],
            company_name=row["company_name"],
            siret=row["siret"],
            vat_number=row["vat_number"],
            status=ClientStatus(row["status"]),
            metadata=json_from_db(row["metadata"]),
            created_at=dt_from_db(row["created_at"]),
            updated_at=dt_from_db(row["updated_at"]),
        )
