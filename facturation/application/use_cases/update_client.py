"""Update Client Use Case."""

from facturation.application.dto.requests import UpdateClientRequest
from facturation.application.dto.responses import ClientResponse
from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.client import Client
from facturation.core.exceptions import ClientNotFoundError, ValidationError
from facturation.core.interfaces import IClientStore

logger = get_logger(__name__)

_REQUIRED = ("name", "email", "country", "status")


class UpdateClientUseCase:
    """Edit a client. Archived clients are read-only."""

    def __init__(
        self,
        client_store: IClientStore | None = None,
        clock: Clock | None = None,
    ):
        self._client_store = client_store
        self._clock = clock

    async def _get_client_store(self) -> IClientStore:
        if self._client_store is None:
            from facturation.infrastructure.storage.sqlite import get_client_store

            self._client_store = await get_client_store()
        return self._client_store

    async def execute(self, client_id: int, request: UpdateClientRequest) -> Client:
        """
        Apply a partial update.

        Raises:
            ClientNotFoundError: If the client is missing or archived
            DuplicateClientEmailError: If another non-archived client has
                the new email
            ValidationError: If a required field is cleared
        """
        fields = request.model_dump(exclude_unset=True)
        for required in _REQUIRED:
            if required in fields and fields[required] is None:
                raise ValidationError(required, "Field cannot be cleared")

        if "email" in fields:
            fields["email"] = fields["email"].lower()

        store = await self._get_client_store()
        client = await store.get_client(client_id)
        if client is None or client.is_archived:
            raise ClientNotFoundError(client_id)

        updated = await store.update_client(
            client_id, fields, (self._clock or get_clock()).now()
        )

        logger.info("update_client_complete", client_id=client_id, fields=sorted(fields))
        return updated

    def to_response(self, client: Client) -> ClientResponse:
        return ClientResponse.from_entity(client)
