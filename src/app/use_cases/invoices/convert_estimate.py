"""ConvertEstimateToInvoice Use Case

Creates an invoice from an approved estimate. The invoice keeps a deep copy
of the estimate's client, project and line items, so later changes to (or
deletion of) the estimate never reach it.
"""

from datetime import date
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.estimate_repository import EstimateRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.estimate import EstimateStatus
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.line_item import (
    LineItemIntegrityError,
    sanitize_line_items,
    line_items_to_storage,
    document_total,
)
from .dtos import ConvertEstimateInput, InvoiceResponseDTO, to_invoice_response
from .numbering import next_invoice_number

CONVERTED_NOTE = "Converted from estimate."


class ConvertEstimateToInvoice:
    """
    Use Case: Convert an approved estimate into an invoice

    Business Rules:
    1. The estimate must belong to the caller (NOT_FOUND otherwise)
    2. Only approved estimates convert (CONFLICT otherwise)
    3. The estimate is read, never written
    4. client_email is optional; it may be added before sending
    """

    def __init__(
        self,
        uow: UnitOfWork,
        estimate_repo: EstimateRepository,
        invoice_repo: InvoiceRepository,
        number_max_attempts: int = 5,
    ):
        self.uow = uow
        self.estimate_repo = estimate_repo
        self.invoice_repo = invoice_repo
        self.number_max_attempts = number_max_attempts

    async def execute(
        self, estimate_id: str, command: ConvertEstimateInput
    ) -> Result[InvoiceResponseDTO]:
        try:
            estimate = await self.estimate_repo.get_by_id(estimate_id)
            if not estimate or estimate.owner_id != command.owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Estimate {estimate_id} not found")
                )

            if estimate.status != EstimateStatus.APPROVED:
                return Return.err(
                    Error(
                        code="CONFLICT",
                        message="Only approved estimates can be converted to invoices",
                        reason=f"status={estimate.status.value}",
                    )
                )

            items = sanitize_line_items(estimate.line_items)
            if not items:
                return Return.err(
                    Error(code="EMPTY_DOCUMENT", message="Estimate has no valid line items")
                )

            notes = CONVERTED_NOTE
            if command.notes and command.notes.strip():
                notes = f"{CONVERTED_NOTE}\n\n{command.notes.strip()}"

            client_email = (command.client_email or "").strip() or estimate.client_email

            issue_date = date.today()
            invoice_number = await next_invoice_number(
                self.invoice_repo, command.owner_id, issue_date, self.number_max_attempts
            )
            tax_rate = Decimal(estimate.tax_rate)

            invoice = Invoice(
                owner_id=command.owner_id,
                estimate_id=estimate.id,
                invoice_number=invoice_number,
                client_name=estimate.client_name,
                client_email=client_email,
                client_phone=estimate.client_phone,
                project_name=estimate.project_name,
                line_items=line_items_to_storage(items),
                tax_rate=tax_rate,
                total=document_total(items, tax_rate),
                amount_paid=Decimal("0.00"),
                status=InvoiceStatus.UNPAID,
                issue_date=issue_date,
                due_date=command.due_date,
                notes=notes,
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
                    code="CONVERT_ESTIMATE_FAILED",
                    message="Failed to convert estimate to invoice",
                    reason=str(e),
                )
            )
