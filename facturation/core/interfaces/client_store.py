"""Abstract interface for client storage."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from facturation.core.entities.client import Client, ClientStatus


class IClientStore(ABC):
    """
    Interface for client persistence.

    Emails are unique, ignoring case, among clients that are not archived.
    """

    @abstractmethod
    async def create_client(self, client: Client) -> Client:
        """
        Create a client.

        Raises:
            DuplicateClientEmailError: if a non-archived client has the email
        """
        pass

    @abstractmethod
    async def get_client(self, client_id: int) -> Client | None:
        """Get a client by ID, whatever its status."""
        pass

    @abstractmethod
    async def list_clients(
        self,
        status: ClientStatus | None = ClientStatus.ACTIVE,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Client]:
        """List clients ordered by name."""
        pass

    @abstractmethod
    async def update_client(
        self, client_id: int, fields: dict[str, Any], updated_at: datetime
    ) -> Client:
        """
        Update a non-archived client.

        Raises:
            ClientNotFoundError: if the client is missing or archived
            DuplicateClientEmailError: if the new email is taken
        """
        pass

    @abstractmethod
    async def archive_client(self, client_id: int, archived_at: datetime) -> bool:
        """Archive a client. Returns False if missing or already archived."""
        pass
