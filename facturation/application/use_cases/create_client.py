"""Create Client Use Case."""

from facturation.application.dto.requests import CreateClientRequest
from facturation.application.dto.responses import ClientResponse
from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.entities.client import Client
from facturation.core.interfaces import IClientStore

logger = get_logger(__name__)


class CreateClientUseCase:
    """Register a client invoices can be billed to."""

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

    async def execute(self, request: CreateClientRequest) -> Client:
        """
        Store a new active client. The email is kept lowercase.

        Raises:
            DuplicateClientEmailError: If a non-archived client has the email
        """
        now = (self._clock or get_clock()).now()
        client = Client(
            **request.model_dump(exclude={"email"}),
            email=request.email.lower(),
            created_at=now,
            updated_at=now,
        )

        store = await self._get_client_store()
        created = await store.create_client(client)

        logger.info("create_client_complete", client_id=created.id)
        return created

    def to_response(self, client: Client) -> ClientResponse:
        return ClientResponse.from_entity(client)
