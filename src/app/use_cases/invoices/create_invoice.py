"""CreateInvoice Use Case

Creates a standalone invoice (not converted from an estimate).
"""

from datetime import date
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.line_item import (
    LineItemIntegrityError,
    sanitize_line_items,
    line_items_to_storage,
    document_total,
)
from .dtos import CreateInvoiceInput, InvoiceResponseDTO, to_invoice_response
from .numbering import next_invoice_number


class CreateInvoice:
    """
    Use Case: Create a standalone invoice

    Business Rules:
    1. client_email is required
    2. At least one valid line item after sanitization
    3. total is derived; amount_paid starts at 0 and status at unpaid
    4. invoice_number is unique within the owner

    Flow:
    1. Validate and sanitize
    2. Allocate invoice number
    3. Persist (store assigns view_token)
    4. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        number_max_attempts: int = 5,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.number_max_attempts = number_max_attempts

    async def execute(self, command: CreateInvoiceInput) -> Result[InvoiceResponseDTO]:
        client_email = command.client_email.strip()
        if not client_email:
            return Return.err(
                Error(code="VALIDATION_ERROR", message="Client email is required")
            )

        try:
            items = sanitize_line_items(command.line_items)
            if not items:
                return Return.err(
                    Error(
                        code="EMPTY_DOCUMENT",
                        message="Invoice needs at least one line item with a description and quantity",
                    )
                )

            issue_date = date.today()
            invoice_number = await next_invoice_number(
                self.invoice_repo, command.owner_id, issue_date, self.number_max_attempts
            )

            invoice = Invoice(
                owner_id=command.owner_id,
                invoice_number=invoice_number,
                client_name=command.client_name.strip(),
                client_email=client_email,
                client_phone=command.client_phone.strip(),
                project_name=command.project_name.strip(),
                line_items=line_items_to_storage(items),
                tax_rate=command.tax_rate,
                total=document_total(items, command.tax_rate),
                amount_paid=Decimal("0.00"),
                status=InvoiceStatus.UNPAID,
                issue_date=issue_date,
                due_date=command.due_date,
                notes=command.notes,
            )

            created = await self.invoice_repo.create(invoice)
            await self.uow.commit()

            return Return.ok(to_invoice_response(created, []))

        except LineItemIntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="INTEGRITY_ERROR", message="Line items failed integrity check", reason=str(e))
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )
