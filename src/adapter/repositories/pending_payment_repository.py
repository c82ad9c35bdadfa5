"""SQLAlchemy implementation of PendingPaymentRepository

Persistence for the payment reconciliation queue.
"""

from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.pending_payment_repository import PendingPaymentRepository
from src.domain.pending_payment import PendingPayment, OPEN_PENDING_PAYMENT_STATES
from src.domain.base import utc_now


class SqlAlchemyPendingPaymentRepository(PendingPaymentRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, pending: PendingPayment) -> PendingPayment:
        self.session.add(pending)
        await self.session.flush()
        await self.session.refresh(pending)
        return pending

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[PendingPayment]:
        stmt = select(PendingPayment).where(
            PendingPayment.idempotency_key == idempotency_key
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_open(self, limit: int = 100) -> List[PendingPayment]:
        stmt = (
            select(PendingPayment)
            .where(PendingPayment.state.in_(OPEN_PENDING_PAYMENT_STATES))
            .order_by(PendingPayment.created_at.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, pending: PendingPayment) -> PendingPayment:
        pending.updated_at = utc_now()
        self.session.add(pending)
        await self.session.flush()
        await self.session.refresh(pending)
        return pending
