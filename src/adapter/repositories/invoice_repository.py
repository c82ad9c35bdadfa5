"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from decimal import Decimal
from typing import Any, Dict, Optional, List
from sqlalchemy import delete, exists, update
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.base import generate_view_token, utc_now
from src.domain.invoice import Invoice, InvoiceStatus, derive_invoice_status
from src.domain.invoice_payment import InvoicePayment
from src.domain.line_item import quantize_money

OVERPAYMENT_TOLERANCE = Decimal("0.005")


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID and stored view_token
        """
        if not invoice.view_token:
            invoice.view_token = generate_view_token()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: str, for_update: bool = False) -> Optional[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_by_owner(
        self,
        owner_id: str,
        status: Optional[InvoiceStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Invoice]:
        statement = select(Invoice).where(Invoice.owner_id == owner_id)

        if status:
            statement = statement.where(Invoice.status == status)

        statement = statement.order_by(Invoice.created_at.desc())
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_by_token(self, view_token: str) -> Optional[Invoice]:
        statement = (
            select(Invoice)
            .where(Invoice.view_token == view_token)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def update(self, invoice: Invoice) -> Invoice:
        """
        Update an existing invoice

        Args:
            invoice: Invoice entity with updated values

        Returns:
            Updated Invoice
        """
        invoice.updated_at = utc_now()
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def delete(self, invoice: Invoice) -> bool:
        statement = (
            delete(Invoice)
            .where(Invoice.id == invoice.id)
            .where(~exists().where(InvoicePayment.invoice_id == invoice.id))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        return result.rowcount == 1

    async def invoice_number_exists(self, owner_id: str, invoice_number: str) -> bool:
        statement = (
            select(func.count())
            .select_from(Invoice)
            .where(Invoice.owner_id == owner_id)
            .where(Invoice.invoice_number == invoice_number)
        )
        result = await self.session.execute(statement)
        count = result.scalar_one()
        return count > 0

    async def update_fields(
        self, invoice_id: str, changes: Dict[str, Any], require_no_payments: bool = False
    ) -> Optional[Invoice]:
        statement = (
            update(Invoice)
            .where(Invoice.id == invoice_id)
            .values(**changes, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )

        if require_no_payments:
            statement = statement.where(
                ~exists().where(InvoicePayment.invoice_id == invoice_id)
            )

        result = await self.session.execute(statement)
        if result.rowcount != 1:
            return None
        return await self.get_by_id(invoice_id)

    async def apply_payment_totals(self, invoice_id: str) -> Optional[Invoice]:
        """
        Recompute amount_paid from the payment rows of this transaction

        Args:
            invoice_id: Invoice ID

        Returns:
            Updated Invoice, or None when the payments exceed the total
        """
        paid_sum = (
            select(func.coalesce(func.sum(InvoicePayment.amount), 0))
            .where(InvoicePayment.invoice_id == invoice_id)
            .scalar_subquery()
        )
        statement = (
            update(Invoice)
            .where(Invoice.id == invoice_id)
            # Amounts are whole cents; the half cent absorbs SQLite float sums
            .where(paid_sum < Invoice.total + OVERPAYMENT_TOLERANCE)
            .values(amount_paid=paid_sum, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        if result.rowcount != 1:
            return None

        invoice = await self.get_by_id(invoice_id)
        invoice.amount_paid = quantize_money(Decimal(str(invoice.amount_paid)))
        invoice.status = derive_invoice_status(invoice.amount_paid, Decimal(invoice.total))
        return await self.update(invoice)
