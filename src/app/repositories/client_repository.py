"""Client Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.client import Client


class ClientRepository(ABC):
    """Repository interface for owner-managed Client records"""

    @abstractmethod
    async def create(self, client: Client) -> Client:
        pass

    @abstractmethod
    async def get_by_id(self, client_id: str) -> Optional[Client]:
        pass

    @abstractmethod
    async def get_by_owner(self, owner_id: str) -> List[Client]:
        pass

    @abstractmethod
    async def update(self, client: Client) -> Client:
        pass

    @abstractmethod
    async def delete(self, client: Client) -> None:
        pass
