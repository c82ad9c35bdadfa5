"""SQLAlchemy implementation of JobRepository"""

from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.job_repository import JobRepository
from src.domain.job import Job


class SqlAlchemyJobRepository(JobRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, job: Job) -> Job:
        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def get_by_id(self, job_id: str) -> Optional[Job]:
        result = await self.session.execute(select(Job).where(Job.id == job_id))
        return result.scalar_one_or_none()

    async def get_by_estimate_id(self, estimate_id: str) -> Optional[Job]:
        result = await self.session.execute(
            select(Job).where(Job.estimate_id == estimate_id)
        )
        return result.scalars().first()

    async def get_by_owner(self, owner_id: str) -> List[Job]:
        stmt = select(Job).where(Job.owner_id == owner_id).order_by(Job.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, job: Job) -> Job:
        self.session.add(job)
        await self.session.flush()
        await self.session.refresh(job)
        return job

    async def delete(self, job: Job) -> None:
        await self.session.delete(job)
        await self.session.flush()
