"""Unit tests for ReconcilePendingPayments use case"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from libs.result import Return, Error
from src.app.services.payment_processor import (
    AuthorizationStatus,
    PaymentAuthorization,
    PaymentProcessorError,
)
from src.app.use_cases.invoices import ReconcilePendingPayments
from src.domain.pending_payment import (
    OPEN_PENDING_PAYMENT_STATES,
    PendingPayment,
    PendingPaymentState,
)


def build_pending(state=PendingPaymentState.UNKNOWN, key="key_1", **overrides) -> PendingPayment:
    data = {
        "invoice_id": "inv_1",
        "amount": Decimal("200.00"),
        "note": "Online payment",
        "idempotency_key": key,
        "state": state,
    }
    data.update(overrides)
    return PendingPayment(**data)


@pytest.fixture
def mock_pending_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda p: p)
    return repo


@pytest.fixture
def mock_processor():
    return MagicMock()


@pytest.fixture
def mock_record_payment():
    record = MagicMock()
    record.execute = AsyncMock(return_value=Return.ok(MagicMock()))
    return record


@pytest.fixture
def use_case(mock_uow, mock_pending_repo, mock_processor, mock_record_payment):
    return ReconcilePendingPayments(
        uow=mock_uow,
        pending_repo=mock_pending_repo,
        payment_processor=mock_processor,
        record_payment=mock_record_payment,
    )


def _queue(repo, entry):
    repo.get_open = AsyncMock(return_value=[entry])
    repo.get_by_idempotency_key = AsyncMock(return_value=entry)


@pytest.mark.asyncio
class TestReconcileUnknown:
    async def test_succeeded_charge_is_recorded(
        self, use_case, mock_pending_repo, mock_processor, mock_record_payment
    ):
        entry = build_pending()
        _queue(mock_pending_repo, entry)
        mock_processor.get_status = AsyncMock(
            return_value=PaymentAuthorization(status=AuthorizationStatus.SUCCEEDED, reference="pi_9")
        )

        result = await use_case.execute()

        assert result.is_ok()
        assert result.value.total_checked == 1
        assert result.value.recorded == 1
        assert entry.state == PendingPaymentState.RECORDED
        invoice_id, command = mock_record_payment.execute.call_args.args
        assert invoice_id == "inv_1"
        assert command.idempotency_key == "key_1"
        assert command.processor_reference == "pi_9"
        assert command.amount == Decimal("200.00")

    async def test_declined_charge_is_marked_failed(
        self, use_case, mock_pending_repo, mock_processor, mock_record_payment
    ):
        entry = build_pending()
        _queue(mock_pending_repo, entry)
        mock_processor.get_status = AsyncMock(
            return_value=PaymentAuthorization(status=AuthorizationStatus.DECLINED, message="declined")
        )

        result = await use_case.execute()

        assert result.value.failed == 1
        assert entry.state == PendingPaymentState.FAILED
        mock_record_payment.execute.assert_not_called()

    async def test_still_unknown_is_left_for_next_run(
        self, use_case, mock_pending_repo, mock_processor, mock_record_payment
    ):
        entry = build_pending()
        _queue(mock_pending_repo, entry)
        mock_processor.get_status = AsyncMock(
            return_value=PaymentAuthorization(status=AuthorizationStatus.UNKNOWN)
        )

        result = await use_case.execute()

        assert result.value.still_pending == 1
        assert entry.state == PendingPaymentState.UNKNOWN
        assert entry.attempts == 1
        mock_record_payment.execute.assert_not_called()

    async def test_processor_error_is_retried_later(
        self, use_case, mock_pending_repo, mock_processor
    ):
        entry = build_pending()
        _queue(mock_pending_repo, entry)
        mock_processor.get_status = AsyncMock(side_effect=PaymentProcessorError("503", transient=True))

        result = await use_case.execute()

        assert result.value.still_pending == 1
        assert "503" in entry.last_error


@pytest.mark.asyncio
class TestReconcileAuthorized:
    async def test_authorized_entry_is_recorded_without_processor_lookup(
        self, use_case, mock_pending_repo, mock_processor, mock_record_payment
    ):
        entry = build_pending(state=PendingPaymentState.AUTHORIZED, processor_reference="pi_1")
        _queue(mock_pending_repo, entry)
        mock_processor.get_status = AsyncMock()

        result = await use_case.execute()

        assert result.value.recorded == 1
        mock_processor.get_status.assert_not_called()
        assert mock_record_payment.execute.call_args.args[1].processor_reference == "pi_1"

    async def test_recording_failure_keeps_entry_authorized(
        self, use_case, mock_pending_repo, mock_record_payment
    ):
        entry = build_pending(state=PendingPaymentState.AUTHORIZED, processor_reference="pi_1")
        _queue(mock_pending_repo, entry)
        mock_record_payment.execute = AsyncMock(
            return_value=Return.err(Error(code="RECORD_PAYMENT_FAILED", message="db down"))
        )

        result = await use_case.execute()

        assert result.value.still_pending == 1
        assert entry.state == PendingPaymentState.AUTHORIZED
        assert entry.last_error.startswith("RECORD_PAYMENT_FAILED")

    async def test_one_broken_entry_does_not_stop_the_batch(
        self, use_case, mock_pending_repo, mock_record_payment, mock_uow
    ):
        good = build_pending(state=PendingPaymentState.AUTHORIZED, key="key_good")
        mock_pending_repo.get_open = AsyncMock(
            return_value=[build_pending(key="key_bad"), good]
        )
        mock_pending_repo.get_by_idempotency_key = AsyncMock(
            side_effect=[Exception("row vanished"), good, good]
        )

        result = await use_case.execute()

        assert result.value.total_checked == 2
        assert result.value.still_pending == 1
        assert result.value.recorded == 1
        mock_uow.rollback.assert_called()

    async def test_refused_payment_moves_to_refund_required(
        self, use_case, mock_pending_repo, mock_record_payment
    ):
        entry = build_pending(state=PendingPaymentState.AUTHORIZED, processor_reference="pi_1")
        _queue(mock_pending_repo, entry)
        mock_record_payment.execute = AsyncMock(
            return_value=Return.err(
                Error(code="CONFLICT", message="Invoice is already paid", reason="invoice_id=inv_1")
            )
        )

        with patch("src.app.use_cases.invoices.reconcile_payments.sentry_sdk") as mock_sentry:
            result = await use_case.execute()

        assert result.value.refund_required == 1
        assert result.value.still_pending == 0
        assert entry.state == PendingPaymentState.REFUND_REQUIRED
        assert entry.last_error == "CONFLICT: invoice_id=inv_1"
        mock_sentry.capture_message.assert_called_once()
        assert "pi_1" in mock_sentry.capture_message.call_args.args[0]

    async def test_refund_required_is_not_an_open_state(self):
        assert PendingPaymentState.REFUND_REQUIRED not in OPEN_PENDING_PAYMENT_STATES
        assert PendingPaymentState.AUTHORIZED in OPEN_PENDING_PAYMENT_STATES
