"""Client API Routes"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.client_request import CreateClientRequest
from src.app.use_cases.clients import (
    CreateClient,
    GetClient,
    ListClients,
    UpdateClient,
    DeleteClient,
    CreateClientInput,
    UpdateClientInput,
    ClientResponseDTO,
    ListClientsResponseDTO,
)
from src.adapter.repositories.client_repository import SqlAlchemyClientRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.auth import get_owner_id
from src.api.error import raise_for_error

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.post("", response_model=ClientResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: CreateClientRequest,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = CreateClient(
        uow=SqlAlchemyUnitOfWork(session),
        client_repo=SqlAlchemyClientRepository(session),
    )
    result = await use_case.execute(CreateClientInput(owner_id=owner_id, **request.model_dump()))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("", response_model=ListClientsResponseDTO)
async def list_clients(
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    result = await ListClients(SqlAlchemyClientRepository(session)).execute(owner_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{client_id}", response_model=ClientResponseDTO)
async def get_client(
    client_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    result = await GetClient(SqlAlchemyClientRepository(session)).execute(owner_id, client_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch("/{client_id}", response_model=ClientResponseDTO)
async def update_client(
    client_id: str,
    request: UpdateClientInput,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdateClient(
        uow=SqlAlchemyUnitOfWork(session),
        client_repo=SqlAlchemyClientRepository(session),
    )
    result = await use_case.execute(owner_id, client_id, request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = DeleteClient(
        uow=SqlAlchemyUnitOfWork(session),
        client_repo=SqlAlchemyClientRepository(session),
    )
    result = await use_case.execute(owner_id, client_id)

    if result.is_err():
        raise_for_error(result.error)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
