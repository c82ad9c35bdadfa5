"""ReconcilePendingPayments Use Case

Resolves processor payments that are not yet reflected in an invoice's
payment history: ambiguous timeouts and charges whose local record failed.
"""

import logging
import time
import sentry_sdk
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.payment_processor import (
    PaymentProcessor,
    PaymentProcessorError,
    AuthorizationStatus,
)
from src.app.repositories.pending_payment_repository import PendingPaymentRepository
from src.domain.base import utc_now
from src.domain.pending_payment import PendingPayment, PendingPaymentState
from .dtos import RecordPaymentCommand, ReconciliationResultDTO
from .record_payment import RecordPayment

logger = logging.getLogger(__name__)


class ReconcilePendingPayments:
    """
    Use Case: Drain the pending payment queue

    Business Rules:
    1. UNKNOWN entries are resolved only by asking the processor
       - succeeded: record the payment
       - declined: mark FAILED
       - still unknown: leave for the next run
    2. AUTHORIZED entries already moved money and are re-recorded until they
       stick; every failure is logged as an error
    3. An invoice that refuses the payment for good (CONFLICT) moves the
       entry to REFUND_REQUIRED, escalated once and never retried
    4. Recording reuses the entry's idempotency key, so a payment that was
       in fact recorded earlier is never counted twice

    Flow:
    1. Load open entries (oldest first)
    2. Resolve each entry independently
    3. Return counts
    """

    def __init__(
        self,
        uow: UnitOfWork,
        pending_repo: PendingPaymentRepository,
        payment_processor: PaymentProcessor,
        record_payment: RecordPayment,
    ):
        self.uow = uow
        self.pending_repo = pending_repo
        self.payment_processor = payment_processor
        self.record_payment = record_payment

    async def execute(self, batch_size: int = 100) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = utc_now()
        recorded = failed = still_pending = refund_required = 0

        try:
            entries = await self.pending_repo.get_open(limit=batch_size)
            keys = [entry.idempotency_key for entry in entries]
            logger.info(f"Reconciling {len(keys)} pending payments")

            for key in keys:
                try:
                    state = await self._reconcile(key)
                except Exception as e:
                    await self.uow.rollback()
                    logger.error(f"Pending payment {key} could not be reconciled: {e}")
                    still_pending += 1
                    continue

                if state == PendingPaymentState.RECORDED:
                    recorded += 1
                elif state == PendingPaymentState.REFUND_REQUIRED:
                    refund_required += 1
                elif state == PendingPaymentState.FAILED:
                    failed += 1
                else:
                    still_pending += 1

            execution_time_ms = int((time.time() - start_time) * 1000)
            return Return.ok(
                ReconciliationResultDTO(
                    total_checked=len(keys),
                    recorded=recorded,
                    failed=failed,
                    still_pending=still_pending,
                    refund_required=refund_required,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Payment reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile pending payments",
                    reason=str(e),
                )
            )

    async def _reconcile(self, idempotency_key: str) -> PendingPaymentState:
        entry = await self.pending_repo.get_by_idempotency_key(idempotency_key)

        if entry.state == PendingPaymentState.UNKNOWN:
            try:
                authorization = await self.payment_processor.get_status(idempotency_key)
            except PaymentProcessorError as e:
                return await self._retry_later(entry, f"Processor status lookup failed: {e}")

            if authorization.status == AuthorizationStatus.DECLINED:
                entry.state = PendingPaymentState.FAILED
                entry.last_error = authorization.message
                entry.attempts += 1
                await self.pending_repo.update(entry)
                await self.uow.commit()
                logger.info(f"Pending payment {idempotency_key} was not charged, marked failed")
                return PendingPaymentState.FAILED

            if authorization.status != AuthorizationStatus.SUCCEEDED:
                return await self._retry_later(entry, "Processor outcome still unknown")

            entry.processor_reference = authorization.reference or entry.processor_reference

        return await self._record(entry)

    async def _record(self, entry: PendingPayment) -> PendingPaymentState:
        idempotency_key = entry.idempotency_key
        invoice_id = entry.invoice_id
        command = RecordPaymentCommand(
            amount=Decimal(entry.amount),
            note=entry.note,
            idempotency_key=idempotency_key,
            processor_reference=entry.processor_reference,
        )

        result = await self.record_payment.execute(invoice_id, command)

        # RecordPayment commits or rolls back; reload the entry either way
        entry = await self.pending_repo.get_by_idempotency_key(idempotency_key)
        entry.processor_reference = command.processor_reference

        if result.is_err():
            if result.error.code == "CONFLICT":
                return await self._refund_required(entry, invoice_id, result.error)

            entry.state = PendingPaymentState.AUTHORIZED
            logger.error(
                f"Captured payment {idempotency_key} for invoice {invoice_id} "
                f"could not be recorded: {result.error.code} {result.error.message}"
            )
            return await self._retry_later(
                entry, f"{result.error.code}: {result.error.reason or result.error.message}"
            )

        entry.state = PendingPaymentState.RECORDED
        entry.attempts += 1
        entry.last_error = None
        await self.pending_repo.update(entry)
        await self.uow.commit()
        logger.info(f"Pending payment {idempotency_key} recorded on invoice {invoice_id}")
        return PendingPaymentState.RECORDED

    async def _refund_required(
        self, entry: PendingPayment, invoice_id: str, error: Error
    ) -> PendingPaymentState:
        entry.state = PendingPaymentState.REFUND_REQUIRED
        entry.attempts += 1
        entry.last_error = f"{error.code}: {error.reason or error.message}"
        await self.pending_repo.update(entry)
        await self.uow.commit()

        logger.error(
            f"Captured payment {entry.idempotency_key} (reference={entry.processor_reference}) "
            f"can never be recorded on invoice {invoice_id} and must be refunded: {error.message}"
        )
        sentry_sdk.capture_message(
            f"Captured payment needs refund: invoice={invoice_id} key={entry.idempotency_key} "
            f"reference={entry.processor_reference}",
            level="error",
        )
        return PendingPaymentState.REFUND_REQUIRED

    async def _retry_later(self, entry: PendingPayment, error: str) -> PendingPaymentState:
        entry.attempts += 1
        entry.last_error = error
        updated = await self.pending_repo.update(entry)
        await self.uow.commit()
        return updated.state
