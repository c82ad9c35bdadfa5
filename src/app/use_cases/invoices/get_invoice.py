"""GetInvoice Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from .dtos import InvoiceResponseDTO, to_invoice_response


class GetInvoice:
    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: InvoicePaymentRepository,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(self, owner_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice or invoice.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Invoice {invoice_id} not found")
                )
            payments = await self.payment_repo.get_by_invoice_id(invoice_id)
            return Return.ok(to_invoice_response(invoice, payments))

        except Exception as e:
            return Return.err(
                Error(
                    code="GET_INVOICE_FAILED",
                    message="Failed to load invoice",
                    reason=str(e),
                )
            )
