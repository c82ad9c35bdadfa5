"""RecordPayment Use Case

Appends a payment to an invoice and re-derives amount_paid and status.
Replays are idempotent and the totals write refuses to overpay.
"""

from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_payment import InvoicePayment
from .dtos import RecordPaymentCommand, InvoiceResponseDTO, to_invoice_response


class RecordPayment:
    """
    Use Case: Record a payment against an invoice

    Business Rules:
    1. Idempotency: a known idempotency_key returns the current state
    2. Paid invoices accept no further payments (CONFLICT)
    3. Overpayment is rejected (CONFLICT)
    4. amount_paid is the SQL SUM of payment rows, never read-modify-write
       from memory
    5. The totals write is conditional on the payment sum staying within the
       total, so concurrent payments cannot overpay even without row locks

    Flow:
    1. Lock invoice (SELECT FOR UPDATE)
    2. Check idempotency
    3. Validate status and balance
    4. Append payment row
    5. Recompute totals and status (conditional on sum <= total)
    6. Commit
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
        self,
        invoice_id: str,
        command: RecordPaymentCommand,
        owner_id: Optional[str] = None,
    ) -> Result[InvoiceResponseDTO]:
        """
        Execute payment recording

        Args:
            invoice_id: Invoice to pay
            command: RecordPaymentCommand with amount and optional idempotency_key
            owner_id: Caller's account; None for trusted internal callers

        Returns:
            Result[InvoiceResponseDTO]: Updated invoice with payment history or error
        """
        try:
            # Step 1: Lock invoice row
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice or (owner_id is not None and invoice.owner_id != owner_id):
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Invoice {invoice_id} not found")
                )

            # Step 2: Idempotent replay
            if command.idempotency_key:
                existing = await self.payment_repo.get_by_idempotency_key(
                    command.idempotency_key
                )
                if existing:
                    same_invoice = existing.invoice_id == invoice_id
                    await self.uow.rollback()
                    if not same_invoice:
                        return Return.err(
                            Error(
                                code="CONFLICT",
                                message="Idempotency key already used for another invoice",
                                reason=f"idempotency_key={command.idempotency_key}",
                            )
                        )
                    return await self._current_state(invoice_id)

            # Step 3: Validate status and balance
            if invoice.status == InvoiceStatus.PAID:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CONFLICT",
                        message="Invoice is already paid",
                        reason=f"invoice_id={invoice_id}",
                    )
                )

            balance_due = invoice.balance_due
            if command.amount > balance_due:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CONFLICT",
                        message=f"Payment of {command.amount} exceeds balance due of {balance_due}",
                        reason=f"amount={command.amount}, balance_due={balance_due}",
                    )
                )

            # Step 4: Append payment row
            await self.payment_repo.create(
                InvoicePayment(
                    invoice_id=invoice_id,
                    amount=command.amount,
                    note=command.note,
                    idempotency_key=command.idempotency_key,
                    processor_reference=command.processor_reference,
                )
            )

            # Step 5: Recompute amount_paid and status from payment rows,
            # guarded against payments committed since the balance check
            updated = await self.invoice_repo.apply_payment_totals(invoice_id)
            if updated is None:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="CONFLICT",
                        message=f"Payment of {command.amount} exceeds the remaining balance",
                        reason=f"invoice_id={invoice_id}, amount={command.amount}",
                    )
                )

            # Step 6: Commit
            await self.uow.commit()

            payments = await self.payment_repo.get_by_invoice_id(invoice_id)
            return Return.ok(to_invoice_response(updated, payments))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RECORD_PAYMENT_FAILED",
                    message="Failed to record payment",
                    reason=str(e),
                )
            )

    async def _current_state(self, invoice_id: str) -> Result[InvoiceResponseDTO]:
        invoice = await self.invoice_repo.get_by_id(invoice_id)
        payments = await self.payment_repo.get_by_invoice_id(invoice_id)
        return Return.ok(to_invoice_response(invoice, payments))
