"""PayInvoice Use Case

Charges the client through the payment processor and records the payment
on the invoice. Money movement and bookkeeping are two systems; every path
where they can disagree ends in the pending payment queue.
"""

import asyncio
import hashlib
import logging
import sentry_sdk
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.notification_service import NotificationService, NotificationTemplate
from src.app.services.payment_processor import (
    PaymentProcessor,
    PaymentAuthorization,
    AuthorizationStatus,
    PaymentProcessorError,
    PaymentProcessorTimeout,
)
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_payment_repository import InvoicePaymentRepository
from src.app.repositories.pending_payment_repository import PendingPaymentRepository
from src.app.use_cases.invoices.dtos import (
    RecordPaymentCommand,
    PublicInvoiceView,
    to_public_invoice_view,
)
from src.app.use_cases.invoices.record_payment import RecordPayment
from src.domain.invoice import InvoiceStatus
from src.domain.line_item import quantize_money
from src.domain.pending_payment import PendingPayment, PendingPaymentState
from .dtos import PayInvoiceCommand, PayInvoiceResultDTO
from .errors import DOCUMENT_NOT_FOUND, is_well_formed_token, to_public_error

logger = logging.getLogger(__name__)

PAYMENT_NOTE = "Online payment"

REFUND_REQUIRED = Error(
    code="PAYMENT_REFUND_REQUIRED",
    message="The invoice no longer accepts this payment; the charge will be refunded",
)


def payment_idempotency_key(invoice_id: str, amount: Decimal, client_nonce: str) -> str:
    raw = f"{invoice_id}:{quantize_money(amount)}:{client_nonce}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class PayInvoice:
    """
    Use Case: Client pays an invoice from the public page

    Business Rules:
    1. Paid invoices and overpayments are refused before any charge
    2. One idempotency key per (invoice, amount, client nonce); it is sent to
       the processor and stored on the payment row
    3. Processor calls are bounded by a timeout; transient failures are
       retried with a linear backoff
    4. Timeout: nothing is recorded; the key is queued as UNKNOWN
    5. Charged but not recorded: the key is queued as AUTHORIZED, or as
       REFUND_REQUIRED when the invoice refused it for good, and the
       failure is escalated
    6. The payment_received message is best effort

    Flow:
    1. Resolve invoice by token
    2. Replay check by idempotency key
    3. Validate status and balance
    4. Authorize with the processor
    5. Record payment (RecordPayment re-validates against the stored total)
    6. Notify
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: InvoicePaymentRepository,
        pending_repo: PendingPaymentRepository,
        payment_processor: PaymentProcessor,
        record_payment: RecordPayment,
        notification_service: Optional[NotificationService] = None,
        timeout_seconds: float = 15.0,
        max_retries: int = 2,
        backoff_seconds: float = 1.0,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.pending_repo = pending_repo
        self.payment_processor = payment_processor
        self.record_payment = record_payment
        self.notification_service = notification_service
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds

    async def execute(self, token: str, command: PayInvoiceCommand) -> Result[PayInvoiceResultDTO]:
        if not is_well_formed_token(token):
            return Return.err(DOCUMENT_NOT_FOUND)

        amount = quantize_money(command.amount)

        try:
            # Step 1: Resolve invoice
            invoice = await self.invoice_repo.get_by_token(token)
            if not invoice:
                return Return.err(DOCUMENT_NOT_FOUND)

            invoice_id = invoice.id
            recipient = invoice.client_email or (command.payer_email or "")
            idempotency_key = payment_idempotency_key(invoice_id, amount, command.client_nonce)

            # Step 2: Replays of an attempt that already finished
            existing = await self.payment_repo.get_by_idempotency_key(idempotency_key)
            if existing:
                return Return.ok(
                    PayInvoiceResultDTO(
                        outcome="paid",
                        payment_reference=existing.processor_reference,
                        invoice=to_public_invoice_view(invoice),
                    )
                )

            pending = await self.pending_repo.get_by_idempotency_key(idempotency_key)
            if pending:
                return self._pending_outcome(pending, invoice)

            # Step 3: Refuse before charging
            if invoice.status == InvoiceStatus.PAID:
                return Return.err(self._public_conflict(invoice_id, "Invoice is already paid"))

            balance_due = invoice.balance_due
            if amount > balance_due:
                return Return.err(
                    self._public_conflict(
                        invoice_id, f"Payment of {amount} exceeds balance due of {balance_due}"
                    )
                )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                to_public_error(
                    Error(code="PAY_INVOICE_FAILED", message="Failed to load invoice", reason=str(e)),
                    context="pay_invoice",
                )
            )

        # Step 4: Authorize
        try:
            authorization = await self._authorize(amount, command.payment_method, idempotency_key)
        except PaymentProcessorTimeout as e:
            return await self._queue_unknown(invoice_id, amount, idempotency_key, str(e))
        except PaymentProcessorError as e:
            if e.transient:
                return await self._queue_unknown(invoice_id, amount, idempotency_key, str(e))
            logger.warning(f"Payment for invoice {invoice_id} refused by processor: {e}")
            return Return.err(
                Error(code="PAYMENT_DECLINED", message="Payment could not be processed")
            )

        if authorization.status == AuthorizationStatus.DECLINED:
            return Return.err(
                Error(
                    code="PAYMENT_DECLINED",
                    message=authorization.message or "Payment was declined",
                )
            )

        if authorization.status != AuthorizationStatus.SUCCEEDED:
            return await self._queue_unknown(
                invoice_id, amount, idempotency_key, authorization.message or "Outcome unknown"
            )

        # Step 5: Record
        record_command = RecordPaymentCommand(
            amount=amount,
            note=PAYMENT_NOTE,
            idempotency_key=idempotency_key,
            processor_reference=authorization.reference,
        )
        recorded = await self.record_payment.execute(invoice_id, record_command)

        if recorded.is_err():
            return await self._queue_authorized(
                invoice_id, amount, idempotency_key, authorization, recorded.error
            )

        # Step 6: Notify
        await self._notify(recipient, recorded.value.invoice_number, amount, recorded.value.balance_due)

        invoice_view = PublicInvoiceView(
            **recorded.value.model_dump(include=set(PublicInvoiceView.model_fields))
        )
        return Return.ok(
            PayInvoiceResultDTO(
                outcome="paid",
                payment_reference=authorization.reference,
                invoice=invoice_view,
            )
        )

    async def _authorize(
        self, amount: Decimal, payment_method: str, idempotency_key: str
    ) -> PaymentAuthorization:
        for attempt in range(1, self.max_retries + 2):
            try:
                return await asyncio.wait_for(
                    self.payment_processor.authorize(amount, payment_method, idempotency_key),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError as e:
                raise PaymentProcessorTimeout(
                    f"Payment processor did not answer within {self.timeout_seconds}s"
                ) from e
            except PaymentProcessorTimeout:
                raise
            except PaymentProcessorError as e:
                if not e.transient or attempt > self.max_retries:
                    raise
                wait = attempt * self.backoff_seconds
                logger.warning(
                    f"Payment processor retry {attempt}/{self.max_retries} after: {e}, "
                    f"waiting {wait}s"
                )
                await asyncio.sleep(wait)

    def _pending_outcome(self, pending: PendingPayment, invoice) -> Result[PayInvoiceResultDTO]:
        if pending.state == PendingPaymentState.FAILED:
            return Return.err(Error(code="PAYMENT_DECLINED", message="Payment was declined"))

        if pending.state == PendingPaymentState.REFUND_REQUIRED:
            return Return.err(REFUND_REQUIRED)

        if pending.state == PendingPaymentState.AUTHORIZED:
            return Return.ok(
                PayInvoiceResultDTO(
                    outcome="queued",
                    payment_reference=pending.processor_reference,
                    invoice=to_public_invoice_view(invoice),
                )
            )

        return Return.err(
            Error(
                code="PAYMENT_PENDING",
                message="Payment is being confirmed with the processor",
            )
        )

    def _public_conflict(self, invoice_id: str, message: str) -> Error:
        return to_public_error(
            Error(code="CONFLICT", message=message, reason=f"invoice_id={invoice_id}"),
            context=f"pay_invoice invoice_id={invoice_id}",
        )

    async def _queue_unknown(
        self, invoice_id: str, amount: Decimal, idempotency_key: str, reason: str
    ) -> Result[PayInvoiceResultDTO]:
        logger.warning(
            f"Payment outcome unknown for invoice {invoice_id} (key={idempotency_key}): {reason}"
        )
        queued = await self._enqueue(
            PendingPayment(
                invoice_id=invoice_id,
                amount=amount,
                note=PAYMENT_NOTE,
                idempotency_key=idempotency_key,
                state=PendingPaymentState.UNKNOWN,
                last_error=reason,
            )
        )
        if not queued:
            return self._reconciliation_required(invoice_id, idempotency_key)

        return Return.err(
            Error(
                code="PAYMENT_PENDING",
                message="Payment is being confirmed with the processor",
            )
        )

    async def _queue_authorized(
        self,
        invoice_id: str,
        amount: Decimal,
        idempotency_key: str,
        authorization: PaymentAuthorization,
        error: Error,
    ) -> Result[PayInvoiceResultDTO]:
        # CONFLICT never clears on retry: the invoice was paid by someone else
        refund = error.code == "CONFLICT"
        state = PendingPaymentState.REFUND_REQUIRED if refund else PendingPaymentState.AUTHORIZED

        logger.error(
            f"Payment captured but not recorded for invoice {invoice_id} "
            f"(key={idempotency_key}, reference={authorization.reference}, state={state.value}): "
            f"{error.code} {error.message} reason={error.reason}"
        )
        sentry_sdk.capture_message(
            f"Captured payment {'needs refund' if refund else 'not recorded'}: "
            f"invoice={invoice_id} key={idempotency_key} reference={authorization.reference}",
            level="error",
        )

        # A concurrent request may have recorded the same key
        try:
            existing = await self.payment_repo.get_by_idempotency_key(idempotency_key)
        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Payment lookup for key {idempotency_key} failed: {e}")
            existing = None

        if not existing:
            queued = await self._enqueue(
                PendingPayment(
                    invoice_id=invoice_id,
                    amount=amount,
                    note=PAYMENT_NOTE,
                    idempotency_key=idempotency_key,
                    processor_reference=authorization.reference,
                    state=state,
                    last_error=f"{error.code}: {error.reason or error.message}",
                )
            )
            if not queued:
                return self._reconciliation_required(invoice_id, idempotency_key)
            if refund:
                return Return.err(REFUND_REQUIRED)

        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            invoice_view = to_public_invoice_view(invoice) if invoice else None
        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Could not reload invoice {invoice_id} after queueing payment: {e}")
            invoice_view = None

        return Return.ok(
            PayInvoiceResultDTO(
                outcome="paid" if existing else "queued",
                payment_reference=authorization.reference,
                invoice=invoice_view,
            )
        )

    async def _enqueue(self, pending: PendingPayment) -> bool:
        try:
            existing = await self.pending_repo.get_by_idempotency_key(pending.idempotency_key)
            if existing:
                existing.state = pending.state
                existing.processor_reference = pending.processor_reference or existing.processor_reference
                existing.last_error = pending.last_error
                await self.pending_repo.update(existing)
            else:
                await self.pending_repo.create(pending)
            await self.uow.commit()
            return True
        except Exception as e:
            await self.uow.rollback()
            logger.critical(
                f"Could not queue payment {pending.idempotency_key} for invoice "
                f"{pending.invoice_id} in state {pending.state.value}: {e}"
            )
            return False

    def _reconciliation_required(
        self, invoice_id: str, idempotency_key: str
    ) -> Result[PayInvoiceResultDTO]:
        logger.critical(
            f"Manual reconciliation required for invoice {invoice_id} (key={idempotency_key})"
        )
        sentry_sdk.capture_message(
            f"Manual payment reconciliation required: invoice={invoice_id} key={idempotency_key}",
            level="fatal",
        )
        return Return.err(
            Error(
                code="PAYMENT_RECONCILIATION_REQUIRED",
                message="Payment status needs manual confirmation; do not retry",
                reason=f"idempotency_key={idempotency_key}",
            )
        )

    async def _notify(
        self, recipient: str, invoice_number: str, amount: Decimal, balance_due: Decimal
    ) -> None:
        if not self.notification_service or not recipient:
            return
        try:
            await self.notification_service.send(
                recipient,
                NotificationTemplate.PAYMENT_RECEIVED,
                {
                    "invoiceNumber": invoice_number,
                    "amount": str(amount),
                    "balanceDue": str(balance_due),
                },
            )
        except Exception as e:
            logger.warning(f"Payment receipt for invoice {invoice_number} failed: {e}")
