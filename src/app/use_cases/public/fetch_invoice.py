"""FetchInvoiceByToken Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.use_cases.invoices.dtos import PublicInvoiceView, to_public_invoice_view
from .errors import DOCUMENT_NOT_FOUND, is_well_formed_token, to_public_error


class FetchInvoiceByToken:
    """Public invoice view; an invoice is visible as soon as it exists"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, token: str) -> Result[PublicInvoiceView]:
        if not is_well_formed_token(token):
            return Return.err(DOCUMENT_NOT_FOUND)

        try:
            invoice = await self.invoice_repo.get_by_token(token)
            if not invoice:
                return Return.err(DOCUMENT_NOT_FOUND)
            return Return.ok(to_public_invoice_view(invoice))

        except Exception as e:
            return Return.err(
                to_public_error(
                    Error(code="FETCH_INVOICE_FAILED", message="Failed to load invoice", reason=str(e)),
                    context="fetch_invoice",
                )
            )
