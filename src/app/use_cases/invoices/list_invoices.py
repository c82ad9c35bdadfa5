"""ListInvoices Use Case

Owner dashboard listing, newest first, with each invoice's payment history.
"""

from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.domain.invoice import InvoiceStatus
from .dtos import ListInvoicesResponseDTO, to_invoice_response


class ListInvoices:
    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: InvoicePaymentRepository,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(
        self,
        owner_id: str,
        status: Optional[InvoiceStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Result[ListInvoicesResponseDTO]:
        if limit < 1 or limit > 200 or offset < 0:
            return Return.err(
                Error(code="VALIDATION_ERROR", message="limit must be 1-200 and offset >= 0")
            )

        try:
            invoices = await self.invoice_repo.get_by_owner(
                owner_id, status=status, limit=limit, offset=offset
            )
            responses = []
            for invoice in invoices:
                payments = await self.payment_repo.get_by_invoice_id(invoice.id)
                responses.append(to_invoice_response(invoice, payments))

            return Return.ok(
                ListInvoicesResponseDTO(invoices=responses, limit=limit, offset=offset)
            )
        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_INVOICES_FAILED",
                    message="Failed to list invoices",
                    reason=str(e),
                )
            )
