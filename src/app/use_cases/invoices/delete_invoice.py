"""DeleteInvoice Use Case"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository


class DeleteInvoice:
    """
    Use Case: Delete an invoice

    Invoices with recorded payments are kept as financial history (CONFLICT).
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: InvoicePaymentRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(self, owner_id: str, invoice_id: str) -> Result[None]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice or invoice.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Invoice {invoice_id} not found")
                )

            if await self.payment_repo.count_by_invoice_id(invoice_id) > 0:
                return await self._has_payments(invoice_id)

            # Re-checked by the DELETE itself in case a payment landed meanwhile
            if not await self.invoice_repo.delete(invoice):
                return await self._has_payments(invoice_id)

            await self.uow.commit()
            return Return.ok(None)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_INVOICE_FAILED",
                    message="Failed to delete invoice",
                    reason=str(e),
                )
            )

    async def _has_payments(self, invoice_id: str) -> Result[None]:
        await self.uow.rollback()
        return Return.err(
            Error(
                code="CONFLICT",
                message="Invoices with recorded payments cannot be deleted",
                reason=f"invoice_id={invoice_id}",
            )
        )
