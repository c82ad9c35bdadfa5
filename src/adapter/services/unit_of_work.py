"""SQLAlchemy Unit of Work

Every repository built for a request shares one AsyncSession; this object
owns that session's transaction boundary.
"""

from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        # Leaving the block without commit() discards pending writes
        if exc_type is not None or self.session.in_transaction():
            await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
