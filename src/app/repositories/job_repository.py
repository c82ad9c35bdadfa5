"""Job Repository Interface"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.job import Job


class JobRepository(ABC):
    """Repository interface for the Job dashboard projection"""

    @abstractmethod
    async def create(self, job: Job) -> Job:
        pass

    @abstractmethod
    async def get_by_id(self, job_id: str) -> Optional[Job]:
        pass

    @abstractmethod
    async def get_by_estimate_id(self, estimate_id: str) -> Optional[Job]:
        pass

    @abstractmethod
    async def get_by_owner(self, owner_id: str) -> List[Job]:
        pass

    @abstractmethod
    async def update(self, job: Job) -> Job:
        pass

    @abstractmethod
    async def delete(self, job: Job) -> None:
        pass
