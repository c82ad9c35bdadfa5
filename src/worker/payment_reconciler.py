"""Payment Reconciliation Background Worker

Drains the pending payment queue: processor charges whose outcome was
unknown at request time, and captured charges that could not be recorded
on their invoice. Can be run as a standalone script or from a scheduler.
"""

import asyncio
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_payment_repository import SqlAlchemyInvoicePaymentRepository
from src.adapter.repositories.pending_payment_repository import SqlAlchemyPendingPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.payment_processor import PaymentProcessor
from src.app.use_cases.invoices import (
    RecordPayment,
    ReconcilePendingPayments,
    ReconciliationResultDTO,
)
from src.domain.base import utc_now

logger = logging.getLogger(__name__)


class PaymentReconcilerWorker:
    """
    Background worker for pending payment reconciliation

    Usage:
        # Run once
        worker = PaymentReconcilerWorker()
        result = await worker.run_once()

        # Run continuously
        worker = PaymentReconcilerWorker()
        await worker.run_forever(interval_seconds=300)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        payment_processor: Optional[PaymentProcessor] = None,
        batch_size: Optional[int] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            payment_processor: Processor client (defaults to the configured one)
            batch_size: Entries per pass (defaults to RECONCILIATION_BATCH_SIZE)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.batch_size = batch_size or ApplicationConfig.RECONCILIATION_BATCH_SIZE

        if payment_processor is None:
            from src.depends import get_payment_processor
            payment_processor = get_payment_processor()
        self.payment_processor = payment_processor

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

        logger.info("PaymentReconcilerWorker initialized")

    async def run_once(self) -> ReconciliationResultDTO:
        """
        Run one reconciliation pass

        Returns:
            ReconciliationResultDTO with per-outcome counts
        """
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Payment reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_checked=0,
                recorded=0,
                failed=0,
                still_pending=0,
                reconciliation_time=utc_now(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            record_payment = RecordPayment(
                uow=uow,
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                payment_repo=SqlAlchemyInvoicePaymentRepository(session),
            )
            use_case = ReconcilePendingPayments(
                uow=uow,
                pending_repo=SqlAlchemyPendingPaymentRepository(session),
                payment_processor=self.payment_processor,
                record_payment=record_payment,
            )

            result = await use_case.execute(batch_size=self.batch_size)

            if result.is_err():
                logger.error(f"Reconciliation failed: {result.error.message}")
                raise RuntimeError(f"Reconciliation failed: {result.error.message}")

            response = result.value

            if response.still_pending > 0:
                logger.warning(
                    f"{response.still_pending} payments remain pending after this pass"
                )

            return response

    async def run_forever(self, interval_seconds: int = 300):
        """
        Run reconciliation continuously at specified interval

        Args:
            interval_seconds: Seconds between passes (default: 5 minutes)
        """
        logger.info(
            f"Starting continuous payment reconciliation with {interval_seconds}s interval"
        )

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. "
                    f"Checked {result.total_checked} payments: "
                    f"{result.recorded} recorded, {result.failed} failed, "
                    f"{result.still_pending} pending, {result.refund_required} need refund "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("PaymentReconcilerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.payment_reconciler --once

        # Run continuously with custom interval (in seconds)
        python -m src.worker.payment_reconciler --interval 60
    """
    import argparse

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Payment Reconciliation Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="Interval between runs in seconds"
    )
    args = parser.parse_args()

    worker = PaymentReconcilerWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Reconciliation complete:")
            print(f"  Payments checked: {result.total_checked}")
            print(f"  Recorded: {result.recorded}")
            print(f"  Failed: {result.failed}")
            print(f"  Still pending: {result.still_pending}")
            print(f"  Refund required: {result.refund_required}")
            print(f"  Execution time: {result.execution_time_ms}ms")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
