"""Client CRUD Use Cases"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.client_repository import ClientRepository
from src.domain.client import Client
from src.domain.line_item import quantize_money
from .dtos import (
    CreateClientInput,
    UpdateClientInput,
    ClientResponseDTO,
    ListClientsResponseDTO,
    to_client_response,
)


class CreateClient:
    def __init__(self, uow: UnitOfWork, client_repo: ClientRepository):
        self.uow = uow
        self.client_repo = client_repo

    async def execute(self, command: CreateClientInput) -> Result[ClientResponseDTO]:
        try:
            client = await self.client_repo.create(
                Client(
                    owner_id=command.owner_id,
                    name=command.name.strip(),
                    email=command.email.strip(),
                    phone=command.phone.strip(),
                    address=command.address.strip(),
                )
            )
            await self.uow.commit()
            return Return.ok(to_client_response(client))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="CREATE_CLIENT_FAILED", message="Failed to create client", reason=str(e))
            )


class GetClient:
    def __init__(self, client_repo: ClientRepository):
        self.client_repo = client_repo

    async def execute(self, owner_id: str, client_id: str) -> Result[ClientResponseDTO]:
        try:
            client = await self.client_repo.get_by_id(client_id)
            if not client or client.owner_id != owner_id:
                return Return.err(Error(code="NOT_FOUND", message=f"Client {client_id} not found"))
            return Return.ok(to_client_response(client))
        except Exception as e:
            return Return.err(
                Error(code="GET_CLIENT_FAILED", message="Failed to load client", reason=str(e))
            )


class ListClients:
    def __init__(self, client_repo: ClientRepository):
        self.client_repo = client_repo

    async def execute(self, owner_id: str) -> Result[ListClientsResponseDTO]:
        try:
            clients = await self.client_repo.get_by_owner(owner_id)
            return Return.ok(
                ListClientsResponseDTO(clients=[to_client_response(c) for c in clients])
            )
        except Exception as e:
            return Return.err(
                Error(code="LIST_CLIENTS_FAILED", message="Failed to list clients", reason=str(e))
            )


class UpdateClient:
    def __init__(self, uow: UnitOfWork, client_repo: ClientRepository):
        self.uow = uow
        self.client_repo = client_repo

    async def execute(
        self, owner_id: str, client_id: str, command: UpdateClientInput
    ) -> Result[ClientResponseDTO]:
        try:
            client = await self.client_repo.get_by_id(client_id)
            if not client or client.owner_id != owner_id:
                return Return.err(Error(code="NOT_FOUND", message=f"Client {client_id} not found"))

            if command.name is not None:
                client.name = command.name.strip()
            if command.email is not None:
                client.email = command.email.strip()
            if command.phone is not None:
                client.phone = command.phone.strip()
            if command.address is not None:
                client.address = command.address.strip()
            if command.total_jobs is not None:
                client.total_jobs = command.total_jobs
            if command.total_value is not None:
                client.total_value = quantize_money(command.total_value)

            updated = await self.client_repo.update(client)
            await self.uow.commit()
            return Return.ok(to_client_response(updated))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="UPDATE_CLIENT_FAILED", message="Failed to update client", reason=str(e))
            )


class DeleteClient:
    def __init__(self, uow: UnitOfWork, client_repo: ClientRepository):
        self.uow = uow
        self.client_repo = client_repo

    async def execute(self, owner_id: str, client_id: str) -> Result[None]:
        try:
            client = await self.client_repo.get_by_id(client_id)
            if not client or client.owner_id != owner_id:
                return Return.err(Error(code="NOT_FOUND", message=f"Client {client_id} not found"))

            await self.client_repo.delete(client)
            await self.uow.commit()
            return Return.ok(None)
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="DELETE_CLIENT_FAILED", message="Failed to delete client", reason=str(e))
            )
