"""SQLAlchemy implementation of InvoicePaymentRepository

Append-only payment rows with idempotency enforced by the unique
idempotency_key constraint.
"""

from typing import Optional, List
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.domain.invoice_payment import InvoicePayment


class SqlAlchemyInvoicePaymentRepository(InvoicePaymentRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: InvoicePayment) -> InvoicePayment:
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoicePayment]:
        stmt = (
            select(InvoicePayment)
            .where(InvoicePayment.invoice_id == invoice_id)
            .order_by(InvoicePayment.paid_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[InvoicePayment]:
        stmt = select(InvoicePayment).where(
            InvoicePayment.idempotency_key == idempotency_key
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_by_invoice_id(self, invoice_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(InvoicePayment)
            .where(InvoicePayment.invoice_id == invoice_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
