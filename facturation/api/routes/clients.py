"""
Client endpoints.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from facturation.api.dependencies import (
    get_archive_client_use_case,
    get_clients,
    get_create_client_use_case,
    get_update_client_use_case,
)
from facturation.application.dto.requests import CreateClientRequest, UpdateClientRequest
from facturation.application.dto.responses import (
    ClientListResponse,
    ClientResponse,
    ErrorResponse,
)
from facturation.application.use_cases import (
    ArchiveClientUseCase,
    CreateClientUseCase,
    UpdateClientUseCase,
)
from facturation.core.entities.client import ClientStatus
from facturation.core.exceptions import ClientNotFoundError
from facturation.core.interfaces import IClientStore

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Email already in use"}},
)
async def create_client(
    request: CreateClientRequest,
    use_case: CreateClientUseCase = Depends(get_create_client_use_case),
) -> ClientResponse:
    """Register a client."""
    client = await use_case.execute(request)
    return use_case.to_response(client)


@router.get("", response_model=ClientListResponse)
async def list_clients(
    client_status: ClientStatus | None = Query(
        default=ClientStatus.ACTIVE, alias="status"
    ),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IClientStore = Depends(get_clients),
) -> ClientListResponse:
    """List clients by name."""
    clients = await store.list_clients(status=client_status, limit=limit, offset=offset)
    return ClientListResponse(
        clients=[ClientResponse.from_entity(c) for c in clients],
        total=len(clients),
    )


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    responses={404: {"model": ErrorResponse, "description": "Client not found"}},
)
async def get_client(
    client_id: int,
    store: IClientStore = Depends(get_clients),
) -> ClientResponse:
    """Get a client by ID, archived ones included."""
    client = await store.get_client(client_id)
    if client is None:
        raise ClientNotFoundError(client_id)
    return ClientResponse.from_entity(client)


@router.patch(
    "/{client_id}",
    response_model=ClientResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email already in use"},
        404: {"model": ErrorResponse, "description": "Client not found or archived"},
    },
)
async def update_client(
    client_id: int,
    request: UpdateClientRequest,
    use_case: UpdateClientUseCase = Depends(get_update_client_use_case),
) -> ClientResponse:
    """Edit a client."""
    client = await use_case.execute(client_id, request)
    return use_case.to_response(client)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse, "description": "Client not found or archived"}},
)
async def archive_client(
    client_id: int,
    use_case: ArchiveClientUseCase = Depends(get_archive_client_use_case),
) -> Response:
    """Archive a client. Its invoices are kept."""
    await use_case.execute(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
