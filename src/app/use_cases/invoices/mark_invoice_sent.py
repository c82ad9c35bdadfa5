"""MarkInvoiceSent Use Case

Emails the client a link to the public invoice page.
"""

import logging
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService, NotificationTemplate
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.domain.base import utc_now
from .dtos import InvoiceResponseDTO, to_invoice_response

logger = logging.getLogger(__name__)


class MarkInvoiceSent:
    """
    Use Case: Send an invoice to its client

    Business Rules:
    1. client_email is required
    2. sent_at is only recorded when the message was accepted
    3. Payment status is unaffected
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: InvoicePaymentRepository,
        notification_service: NotificationService,
        public_base_url: str,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.notification_service = notification_service
        self.public_base_url = public_base_url.rstrip("/")

    async def execute(self, owner_id: str, invoice_id: str) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice or invoice.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Invoice {invoice_id} not found")
                )

            if not invoice.client_email:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="VALIDATION_ERROR",
                        message="Client email is required to send an invoice",
                    )
                )

            delivered = await self.notification_service.send(
                invoice.client_email,
                NotificationTemplate.INVOICE_SENT,
                {
                    "clientName": invoice.client_name,
                    "projectName": invoice.project_name,
                    "invoiceNumber": invoice.invoice_number,
                    "total": str(Decimal(invoice.total)),
                    "balanceDue": str(invoice.balance_due),
                    "dueDate": invoice.due_date.isoformat() if invoice.due_date else None,
                    "invoiceUrl": f"{self.public_base_url}/view-invoice/{invoice.view_token}",
                },
            )
            if not delivered:
                logger.warning(f"Invoice {invoice_id} email was not accepted for delivery")
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="UPSTREAM_ERROR",
                        message="Invoice email could not be delivered",
                    )
                )

            # Only sent_at is written, after delivery; payment columns are untouched
            updated = await self.invoice_repo.update_fields(invoice_id, {"sent_at": utc_now()})
            if updated is None:
                await self.uow.rollback()
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Invoice {invoice_id} not found")
                )

            await self.uow.commit()

            payments = await self.payment_repo.get_by_invoice_id(invoice_id)
            return Return.ok(to_invoice_response(updated, payments))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SEND_INVOICE_FAILED",
                    message="Failed to send invoice",
                    reason=str(e),
                )
            )
