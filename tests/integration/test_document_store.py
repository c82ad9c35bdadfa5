"""Integration tests for the document store

Tests cover:
- Conditional sign / reject transitions
- Read receipt recorded once
- amount_paid recomputed from payment rows
- Overpayment and idempotent replay
- Invoice snapshot survives estimate deletion
- Job projection, including events delivered out of order
- Pending payment queue only surfaces open entries
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel.ext.asyncio.session import AsyncSession
from src.domain.estimate import Estimate, EstimateStatus
from src.domain.events import EstimateCreated, EstimateStatusChanged
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.job import JobStatus
from src.domain.pending_payment import PendingPayment, PendingPaymentState
from src.app.use_cases.invoices import (
    RecordPayment,
    RecordPaymentCommand,
    ConvertEstimateToInvoice,
    ConvertEstimateInput,
)
from src.app.use_cases.jobs import ProjectEstimateToJob
from src.adapter.repositories.estimate_repository import SqlAlchemyEstimateRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_payment_repository import SqlAlchemyInvoicePaymentRepository
from src.adapter.repositories.job_repository import SqlAlchemyJobRepository
from src.adapter.repositories.pending_payment_repository import SqlAlchemyPendingPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork

LINE_ITEMS = [{"id": "1", "description": "Deck boards", "quantity": 10, "rate": 50, "total": 500}]


async def create_estimate(session: AsyncSession, status=EstimateStatus.SENT) -> Estimate:
    repo = SqlAlchemyEstimateRepository(session)
    estimate = await repo.create(
        Estimate(
            owner_id="owner_1",
            client_name="Jane Homeowner",
            client_email="jane@example.com",
            project_name="Deck repair",
            line_items=LINE_ITEMS,
            tax_rate=Decimal("0"),
            total=Decimal("500.00"),
            status=status,
        )
    )
    await session.commit()
    return estimate


async def create_invoice(session: AsyncSession, number="INV-20240131-AAAAAA") -> Invoice:
    repo = SqlAlchemyInvoiceRepository(session)
    invoice = await repo.create(
        Invoice(
            owner_id="owner_1",
            invoice_number=number,
            client_name="Jane Homeowner",
            client_email="jane@example.com",
            project_name="Deck repair",
            line_items=LINE_ITEMS,
            tax_rate=Decimal("0"),
            total=Decimal("500.00"),
        )
    )
    await session.commit()
    return invoice


def record_payment_use_case(session: AsyncSession) -> RecordPayment:
    return RecordPayment(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyInvoicePaymentRepository(session),
    )


@pytest.mark.asyncio
class TestEstimateTransitions:
    async def test_sign_succeeds_once(self, db_session: AsyncSession):
        estimate = await create_estimate(db_session)
        estimate_id = estimate.id
        repo = SqlAlchemyEstimateRepository(db_session)

        first = await repo.mark_signed(estimate_id, "Jane", "jane@example.com", "sig", datetime.now(timezone.utc))
        await db_session.commit()
        second = await repo.mark_signed(estimate_id, "Mallory", "m@example.com", "sig", datetime.now(timezone.utc))
        await db_session.commit()

        assert first is True
        assert second is False
        stored = await repo.get_by_id(estimate_id)
        assert stored.status == EstimateStatus.APPROVED
        assert stored.signed_by_name == "Jane"

    async def test_reject_requires_sent(self, db_session: AsyncSession):
        estimate = await create_estimate(db_session, status=EstimateStatus.DRAFT)
        repo = SqlAlchemyEstimateRepository(db_session)

        rejected = await repo.mark_rejected(estimate.id, "too expensive", datetime.now(timezone.utc))

        assert rejected is False

    async def test_read_receipt_is_recorded_once(self, db_session: AsyncSession):
        estimate = await create_estimate(db_session)
        repo = SqlAlchemyEstimateRepository(db_session)

        first = await repo.mark_read(estimate.id, datetime(2024, 1, 1, 9, 0))
        second = await repo.mark_read(estimate.id, datetime(2024, 1, 2, 9, 0))
        await db_session.commit()

        assert first is True
        assert second is False
        stored = await repo.get_by_id(estimate.id)
        assert stored.read_at == datetime(2024, 1, 1, 9, 0)

    async def test_view_token_is_issued_on_create(self, db_session: AsyncSession):
        estimate = await create_estimate(db_session)
        repo = SqlAlchemyEstimateRepository(db_session)

        found = await repo.get_by_token(estimate.view_token)

        assert found.id == estimate.id
        assert len(estimate.view_token) >= 16


@pytest.mark.asyncio
class TestInvoicePayments:
    async def test_partial_then_full_payment(self, db_session: AsyncSession):
        invoice = await create_invoice(db_session)
        invoice_id = invoice.id
        use_case = record_payment_use_case(db_session)

        first = await use_case.execute(invoice_id, RecordPaymentCommand(amount=Decimal("200.00")))
        second = await use_case.execute(invoice_id, RecordPaymentCommand(amount=Decimal("300.00")))

        assert first.value.status == InvoiceStatus.PARTIALLY_PAID
        assert first.value.balance_due == Decimal("300.00")
        assert second.value.status == InvoiceStatus.PAID
        assert second.value.amount_paid == Decimal("500.00")
        assert len(second.value.payments) == 2

    async def test_overpayment_is_rejected(self, db_session: AsyncSession):
        invoice = await create_invoice(db_session)
        # The rejected payment rolls back, which expires the loaded invoice
        invoice_id = invoice.id
        use_case = record_payment_use_case(db_session)

        result = await use_case.execute(invoice_id, RecordPaymentCommand(amount=Decimal("500.01")))

        assert result.is_err()
        assert result.error.code == "CONFLICT"
        count = await SqlAlchemyInvoicePaymentRepository(db_session).count_by_invoice_id(invoice_id)
        assert count == 0

    async def test_paid_invoice_accepts_no_more_payments(self, db_session: AsyncSession):
        invoice = await create_invoice(db_session)
        invoice_id = invoice.id
        use_case = record_payment_use_case(db_session)
        await use_case.execute(invoice_id, RecordPaymentCommand(amount=Decimal("500.00")))

        result = await use_case.execute(invoice_id, RecordPaymentCommand(amount=Decimal("1.00")))

        assert result.error.code == "CONFLICT"

    async def test_idempotent_replay_records_once(self, db_session: AsyncSession):
        invoice = await create_invoice(db_session)
        invoice_id = invoice.id
        use_case = record_payment_use_case(db_session)
        command = RecordPaymentCommand(amount=Decimal("100.00"), idempotency_key="pay-attempt-1")

        await use_case.execute(invoice_id, command)
        replay = await use_case.execute(invoice_id, command)

        assert replay.is_ok()
        assert replay.value.amount_paid == Decimal("100.00")
        assert len(replay.value.payments) == 1

    async def test_invoice_number_is_unique_per_owner(self, db_session: AsyncSession):
        invoice = await create_invoice(db_session, number="INV-20240131-BBBBBB")
        repo = SqlAlchemyInvoiceRepository(db_session)

        assert await repo.invoice_number_exists("owner_1", invoice.invoice_number) is True
        assert await repo.invoice_number_exists("owner_2", invoice.invoice_number) is False


@pytest.mark.asyncio
class TestConversionSnapshot:
    async def test_invoice_survives_estimate_deletion(self, db_session: AsyncSession):
        estimate = await create_estimate(db_session, status=EstimateStatus.APPROVED)
        estimate_id = estimate.id
        estimate_repo = SqlAlchemyEstimateRepository(db_session)
        invoice_repo = SqlAlchemyInvoiceRepository(db_session)
        convert = ConvertEstimateToInvoice(SqlAlchemyUnitOfWork(db_session), estimate_repo, invoice_repo)

        converted = await convert.execute(estimate_id, ConvertEstimateInput(owner_id="owner_1"))
        invoice_id = converted.value.id

        await estimate_repo.delete(await estimate_repo.get_by_id(estimate_id))
        await db_session.commit()

        paid = await record_payment_use_case(db_session).execute(
            invoice_id, RecordPaymentCommand(amount=Decimal("500.00"))
        )

        assert converted.value.estimate_id == estimate_id
        assert converted.value.total == Decimal("500.00")
        assert paid.value.status == InvoiceStatus.PAID
        assert paid.value.line_items[0].description == "Deck boards"


@pytest.mark.asyncio
class TestJobProjection:
    async def test_job_follows_estimate(self, db_session: AsyncSession):
        use_case = ProjectEstimateToJob(
            SqlAlchemyUnitOfWork(db_session), SqlAlchemyJobRepository(db_session)
        )

        await use_case.execute(
            EstimateCreated(
                estimate_id="est_proj",
                owner_id="owner_1",
                client_name="Jane",
                project_name="Deck repair",
                status="draft",
                total=Decimal("500.00"),
            )
        )
        await use_case.execute(
            EstimateStatusChanged(
                estimate_id="est_proj", owner_id="owner_1", status="approved", total=Decimal("500.00")
            )
        )

        job = await SqlAlchemyJobRepository(db_session).get_by_estimate_id("est_proj")
        assert job.status == JobStatus.APPROVED
        assert job.project_type == "Deck repair"

    async def test_status_event_delivered_before_created_event(self, db_session: AsyncSession):
        use_case = ProjectEstimateToJob(
            SqlAlchemyUnitOfWork(db_session), SqlAlchemyJobRepository(db_session)
        )

        await use_case.execute(
            EstimateStatusChanged(
                estimate_id="est_late",
                owner_id="owner_1",
                status="approved",
                total=Decimal("640.00"),
                client_name="Jane",
                project_name="Fence",
            )
        )
        await use_case.execute(
            EstimateCreated(
                estimate_id="est_late",
                owner_id="owner_1",
                client_name="Jane",
                project_name="Fence",
                status="draft",
                total=Decimal("600.00"),
            )
        )

        jobs = await SqlAlchemyJobRepository(db_session).get_by_owner("owner_1")
        assert len(jobs) == 1
        assert jobs[0].status == JobStatus.APPROVED
        assert jobs[0].total == Decimal("640.00")
        assert jobs[0].project_type == "Fence"


@pytest.mark.asyncio
class TestPendingPaymentQueue:
    async def test_refund_required_entries_are_not_reopened(self, db_session: AsyncSession):
        repo = SqlAlchemyPendingPaymentRepository(db_session)
        for key, state in [
            ("key_unknown", PendingPaymentState.UNKNOWN),
            ("key_authorized", PendingPaymentState.AUTHORIZED),
            ("key_refund", PendingPaymentState.REFUND_REQUIRED),
            ("key_recorded", PendingPaymentState.RECORDED),
        ]:
            await repo.create(
                PendingPayment(
                    invoice_id="inv_1",
                    amount=Decimal("100.00"),
                    idempotency_key=key,
                    state=state,
                )
            )
        await db_session.commit()

        open_entries = await repo.get_open()

        assert {entry.idempotency_key for entry in open_entries} == {
            "key_unknown",
            "key_authorized",
        }
