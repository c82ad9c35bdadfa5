"""UpdateInvoice Use Case

Owner edits of an invoice. Priced content is frozen once money was
recorded against it.
"""

from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.domain.invoice import derive_invoice_status
from src.domain.line_item import (
    LineItemIntegrityError,
    sanitize_line_items,
    line_items_to_storage,
    document_total,
)
from .dtos import UpdateInvoiceInput, InvoiceResponseDTO, to_invoice_response


class UpdateInvoice:
    """
    Use Case: Update an invoice

    Business Rules:
    1. Only the owner can edit; other owners get NOT_FOUND
    2. Line items and tax rate are frozen once any payment exists (CONFLICT)
    3. total and status are re-derived; view_token and invoice_number never change
    4. Repricing is written only while no payment row exists, checked by the
       same UPDATE that writes it
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

    async def execute(
        self, owner_id: str, invoice_id: str, command: UpdateInvoiceInput
    ) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice or invoice.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Invoice {invoice_id} not found")
                )

            reprices = command.line_items is not None or command.tax_rate is not None
            if reprices and await self.payment_repo.count_by_invoice_id(invoice_id) > 0:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CONFLICT",
                        message="Line items and tax cannot change after a payment was recorded",
                        reason=f"invoice_id={invoice_id}",
                    )
                )

            changes = {}
            if command.line_items is not None:
                items = sanitize_line_items(command.line_items)
                if not items:
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="EMPTY_DOCUMENT",
                            message="Invoice needs at least one line item with a description and quantity",
                        )
                    )
                changes["line_items"] = line_items_to_storage(items)
            else:
                items = invoice.get_line_items()

            if command.client_name is not None:
                changes["client_name"] = command.client_name.strip()
            if command.client_email is not None:
                changes["client_email"] = command.client_email.strip()
            if command.client_phone is not None:
                changes["client_phone"] = command.client_phone.strip()
            if command.project_name is not None:
                changes["project_name"] = command.project_name.strip()
            if command.due_date is not None:
                changes["due_date"] = command.due_date
            if command.notes is not None:
                changes["notes"] = command.notes
            if command.tax_rate is not None:
                changes["tax_rate"] = command.tax_rate

            if reprices:
                tax_rate = Decimal(changes.get("tax_rate", invoice.tax_rate))
                changes["total"] = document_total(items, tax_rate)
                changes["status"] = derive_invoice_status(Decimal("0.00"), changes["total"])

            updated = await self.invoice_repo.update_fields(
                invoice_id, changes, require_no_payments=reprices
            )
            if updated is None:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CONFLICT",
                        message="Line items and tax cannot change after a payment was recorded",
                        reason=f"invoice_id={invoice_id}",
                    )
                )
            await self.uow.commit()

            payments = await self.payment_repo.get_by_invoice_id(invoice_id)
            return Return.ok(to_invoice_response(updated, payments))

        except LineItemIntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="INTEGRITY_ERROR", message="Line items failed integrity check", reason=str(e))
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_INVOICE_FAILED",
                    message="Failed to update invoice",
                    reason=str(e),
                )
            )
