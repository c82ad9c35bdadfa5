"""Unit tests for PayInvoice use case

Tests cover:
- Successful charge recorded with the derived idempotency key
- Replays of a finished attempt never charge again
- Refusals before any charge (paid, overpay)
- Processor timeout, transient retries, declines
- Charge captured but recording failed (queued, escalation)
- Charge captured on an invoice that refuses it (refund required)
"""

import asyncio
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from libs.result import Return, Error
from src.app.services.notification_service import NotificationTemplate
from src.app.services.payment_processor import (
    AuthorizationStatus,
    PaymentAuthorization,
    PaymentProcessorError,
)
from src.app.use_cases.invoices.dtos import to_invoice_response as build_response
from src.app.use_cases.public import (
    PayInvoice,
    PayInvoiceCommand,
    payment_idempotency_key,
    REQUEST_FAILED,
    DOCUMENT_NOT_FOUND,
)
from src.domain.invoice import InvoiceStatus
from src.domain.pending_payment import PendingPayment, PendingPaymentState
from tests.unit.factories import build_invoice, build_payment, INVOICE_TOKEN

SUCCEEDED = PaymentAuthorization(status=AuthorizationStatus.SUCCEEDED, reference="pi_123")


@pytest.fixture
def command():
    return PayInvoiceCommand(
        amount=Decimal("200.00"),
        payment_method="pm_card_visa",
        client_nonce="nonce-1",
    )


@pytest.fixture
def expected_key():
    return payment_idempotency_key("inv_1", Decimal("200.00"), "nonce-1")


@pytest.fixture
def mock_invoice_repo():
    repo = MagicMock()
    repo.get_by_token = AsyncMock(return_value=build_invoice())
    repo.get_by_id = AsyncMock(return_value=build_invoice())
    return repo


@pytest.fixture
def mock_payment_repo():
    repo = MagicMock()
    repo.get_by_idempotency_key = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_pending_repo():
    repo = MagicMock()
    repo.get_by_idempotency_key = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda p: p)
    repo.update = AsyncMock(side_effect=lambda p: p)
    return repo


@pytest.fixture
def mock_processor():
    processor = MagicMock()
    processor.authorize = AsyncMock(return_value=SUCCEEDED)
    return processor


@pytest.fixture
def mock_record_payment():
    record = MagicMock()
    paid = build_invoice(amount_paid=Decimal("200.00"), status=InvoiceStatus.PARTIALLY_PAID)
    record.execute = AsyncMock(return_value=Return.ok(build_response(paid, [build_payment()])))
    return record


@pytest.fixture
def mock_notifications():
    service = MagicMock()
    service.send = AsyncMock(return_value=True)
    return service


@pytest.fixture
def pay_use_case(
    mock_uow,
    mock_invoice_repo,
    mock_payment_repo,
    mock_pending_repo,
    mock_processor,
    mock_record_payment,
    mock_notifications,
):
    return PayInvoice(
        uow=mock_uow,
        invoice_repo=mock_invoice_repo,
        payment_repo=mock_payment_repo,
        pending_repo=mock_pending_repo,
        payment_processor=mock_processor,
        record_payment=mock_record_payment,
        notification_service=mock_notifications,
        timeout_seconds=0.05,
        max_retries=2,
        backoff_seconds=0,
    )


def test_idempotency_key_is_stable_per_attempt():
    first = payment_idempotency_key("inv_1", Decimal("200"), "nonce-1")

    assert first == payment_idempotency_key("inv_1", Decimal("200.00"), "nonce-1")
    assert first != payment_idempotency_key("inv_1", Decimal("200.00"), "nonce-2")
    assert first != payment_idempotency_key("inv_2", Decimal("200.00"), "nonce-1")


@pytest.mark.asyncio
class TestPayInvoiceSuccess:
    async def test_charge_is_recorded_with_idempotency_key(
        self, pay_use_case, command, expected_key, mock_processor, mock_record_payment, mock_notifications
    ):
        # Act
        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        # Assert
        assert result.is_ok()
        assert result.value.outcome == "paid"
        assert result.value.payment_reference == "pi_123"
        assert result.value.invoice.status == InvoiceStatus.PARTIALLY_PAID
        assert result.value.invoice.balance_due == Decimal("300.00")

        mock_processor.authorize.assert_called_once_with(
            Decimal("200.00"), "pm_card_visa", expected_key
        )
        invoice_id, record_command = mock_record_payment.execute.call_args.args
        assert invoice_id == "inv_1"
        assert record_command.idempotency_key == expected_key
        assert record_command.processor_reference == "pi_123"

        recipient, template, data = mock_notifications.send.call_args.args
        assert recipient == "jane@example.com"
        assert template == NotificationTemplate.PAYMENT_RECEIVED
        assert data["amount"] == "200.00"

    async def test_receipt_failure_does_not_fail_payment(
        self, pay_use_case, command, mock_notifications
    ):
        mock_notifications.send = AsyncMock(side_effect=RuntimeError("smtp down"))

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.is_ok()
        assert result.value.outcome == "paid"


@pytest.mark.asyncio
class TestPayInvoiceReplays:
    async def test_recorded_attempt_is_not_charged_again(
        self, pay_use_case, command, mock_payment_repo, mock_processor
    ):
        mock_payment_repo.get_by_idempotency_key = AsyncMock(
            return_value=build_payment(processor_reference="pi_123")
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.value.outcome == "paid"
        assert result.value.payment_reference == "pi_123"
        mock_processor.authorize.assert_not_called()

    async def test_pending_unknown_attempt_stays_pending(
        self, pay_use_case, command, expected_key, mock_pending_repo, mock_processor
    ):
        mock_pending_repo.get_by_idempotency_key = AsyncMock(
            return_value=PendingPayment(
                invoice_id="inv_1",
                amount=Decimal("200.00"),
                idempotency_key=expected_key,
                state=PendingPaymentState.UNKNOWN,
            )
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_PENDING"
        mock_processor.authorize.assert_not_called()

    async def test_refund_required_attempt_is_not_charged_again(
        self, pay_use_case, command, expected_key, mock_pending_repo, mock_processor
    ):
        mock_pending_repo.get_by_idempotency_key = AsyncMock(
            return_value=PendingPayment(
                invoice_id="inv_1",
                amount=Decimal("200.00"),
                idempotency_key=expected_key,
                processor_reference="pi_123",
                state=PendingPaymentState.REFUND_REQUIRED,
            )
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_REFUND_REQUIRED"
        mock_processor.authorize.assert_not_called()


@pytest.mark.asyncio
class TestPayInvoiceRefusals:
    async def test_unknown_token(self, pay_use_case, command, mock_invoice_repo, mock_processor):
        mock_invoice_repo.get_by_token = AsyncMock(return_value=None)

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error == DOCUMENT_NOT_FOUND
        mock_processor.authorize.assert_not_called()

    async def test_paid_invoice_is_refused_before_charge(
        self, pay_use_case, command, mock_invoice_repo, mock_processor
    ):
        mock_invoice_repo.get_by_token = AsyncMock(
            return_value=build_invoice(amount_paid=Decimal("500.00"), status=InvoiceStatus.PAID)
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error == REQUEST_FAILED
        mock_processor.authorize.assert_not_called()

    async def test_overpayment_is_refused_before_charge(
        self, pay_use_case, mock_processor
    ):
        result = await pay_use_case.execute(
            INVOICE_TOKEN,
            PayInvoiceCommand(amount=Decimal("500.01"), payment_method="pm", client_nonce="n"),
        )

        assert result.error == REQUEST_FAILED
        mock_processor.authorize.assert_not_called()


@pytest.mark.asyncio
class TestPayInvoiceProcessorFailures:
    async def test_timeout_queues_unknown_and_records_nothing(
        self, pay_use_case, command, expected_key, mock_processor, mock_pending_repo, mock_record_payment, mock_uow
    ):
        async def hang(*args):
            await asyncio.sleep(1)

        mock_processor.authorize = AsyncMock(side_effect=hang)

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_PENDING"
        mock_record_payment.execute.assert_not_called()
        queued = mock_pending_repo.create.call_args.args[0]
        assert queued.state == PendingPaymentState.UNKNOWN
        assert queued.idempotency_key == expected_key
        mock_uow.commit.assert_called_once()

    async def test_transient_errors_are_retried(self, pay_use_case, command, mock_processor):
        mock_processor.authorize = AsyncMock(
            side_effect=[
                PaymentProcessorError("502", transient=True),
                PaymentProcessorError("503", transient=True),
                SUCCEEDED,
            ]
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.value.outcome == "paid"
        assert mock_processor.authorize.call_count == 3

    async def test_exhausted_transient_errors_queue_unknown(
        self, pay_use_case, command, mock_processor, mock_pending_repo
    ):
        mock_processor.authorize = AsyncMock(
            side_effect=PaymentProcessorError("503", transient=True)
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_PENDING"
        assert mock_processor.authorize.call_count == 3
        assert mock_pending_repo.create.call_args.args[0].state == PendingPaymentState.UNKNOWN

    async def test_decline_records_nothing(
        self, pay_use_case, command, mock_processor, mock_record_payment, mock_pending_repo
    ):
        mock_processor.authorize = AsyncMock(
            return_value=PaymentAuthorization(
                status=AuthorizationStatus.DECLINED, message="Your card was declined."
            )
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_DECLINED"
        assert result.error.message == "Your card was declined."
        mock_record_payment.execute.assert_not_called()
        mock_pending_repo.create.assert_not_called()

    async def test_non_transient_error_is_declined(self, pay_use_case, command, mock_processor):
        mock_processor.authorize = AsyncMock(side_effect=PaymentProcessorError("bad request"))

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_DECLINED"
        assert mock_processor.authorize.call_count == 1


@pytest.mark.asyncio
class TestPayInvoiceRecordingFailures:
    async def test_captured_charge_is_queued_as_authorized(
        self, pay_use_case, command, expected_key, mock_record_payment, mock_pending_repo
    ):
        mock_record_payment.execute = AsyncMock(
            return_value=Return.err(Error(code="RECORD_PAYMENT_FAILED", message="db down"))
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.is_ok()
        assert result.value.outcome == "queued"
        assert result.value.payment_reference == "pi_123"
        queued = mock_pending_repo.create.call_args.args[0]
        assert queued.state == PendingPaymentState.AUTHORIZED
        assert queued.processor_reference == "pi_123"
        assert queued.idempotency_key == expected_key

    async def test_queue_failure_requires_reconciliation(
        self, pay_use_case, command, mock_record_payment, mock_pending_repo, mock_uow
    ):
        mock_record_payment.execute = AsyncMock(
            return_value=Return.err(Error(code="RECORD_PAYMENT_FAILED", message="db down"))
        )
        mock_pending_repo.create = AsyncMock(side_effect=Exception("db still down"))

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_RECONCILIATION_REQUIRED"
        mock_uow.rollback.assert_called()

    async def test_concurrently_recorded_charge_reports_paid(
        self, pay_use_case, command, mock_record_payment, mock_payment_repo, mock_pending_repo
    ):
        mock_record_payment.execute = AsyncMock(
            return_value=Return.err(Error(code="CONFLICT", message="Invoice is already paid"))
        )
        mock_payment_repo.get_by_idempotency_key = AsyncMock(
            side_effect=[None, build_payment(processor_reference="pi_123")]
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.value.outcome == "paid"
        mock_pending_repo.create.assert_not_called()

    async def test_refused_capture_is_queued_for_refund(
        self, pay_use_case, command, expected_key, mock_record_payment, mock_pending_repo
    ):
        # Another payment settled the invoice between the balance check and the record
        mock_record_payment.execute = AsyncMock(
            return_value=Return.err(
                Error(code="CONFLICT", message="Payment of 200.00 exceeds the remaining balance")
            )
        )

        result = await pay_use_case.execute(INVOICE_TOKEN, command)

        assert result.error.code == "PAYMENT_REFUND_REQUIRED"
        queued = mock_pending_repo.create.call_args.args[0]
        assert queued.state == PendingPaymentState.REFUND_REQUIRED
        assert queued.processor_reference == "pi_123"
        assert queued.idempotency_key == expected_key
        assert queued.last_error.startswith("CONFLICT")
