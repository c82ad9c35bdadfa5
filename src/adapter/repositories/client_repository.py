"""SQLAlchemy implementation of ClientRepository"""

from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.client_repository import ClientRepository
from src.domain.client import Client
from src.domain.base import utc_now


class SqlAlchemyClientRepository(ClientRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, client: Client) -> Client:
        self.session.add(client)
        await self.session.flush()
        await self.session.refresh(client)
        return client

    async def get_by_id(self, client_id: str) -> Optional[Client]:
        result = await self.session.execute(select(Client).where(Client.id == client_id))
        return result.scalar_one_or_none()

    async def get_by_owner(self, owner_id: str) -> List[Client]:
        stmt = select(Client).where(Client.owner_id == owner_id).order_by(Client.name.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, client: Client) -> Client:
        client.updated_at = utc_now()
        self.session.add(client)
        await self.session.flush()
        await self.session.refresh(client)
        return client

    async def delete(self, client: Client) -> None:
        await self.session.delete(client)
        await self.session.flush()
