"""Archive Client Use Case."""

from facturation.config import get_logger
from facturation.core.clock import Clock, get_clock
from facturation.core.exceptions import ClientNotFoundError
from facturation.core.interfaces import IClientStore

logger = get_logger(__name__)


class ArchiveClientUseCase:
    """
    Soft-delete a client by moving it to ``archived``.

    Its invoices are untouched. An archived client stays readable but can
    no longer be edited, invoiced, or hold an email against new clients.
    """

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

    async def execute(self, client_id: int) -> None:
        """
        Raises:
            ClientNotFoundError: If the client is missing or already archived
        """
        store = await self._get_client_store()
        if not await store.archive_client(client_id, (self._clock or get_clock()).now()):
            raise ClientNotFoundError(client_id)

        logger.info("archive_client_complete", client_id=client_id)
