"""Public document routes

Token holders (clients) view, sign, reject and pay documents without an
account. Every unknown, malformed or draft token answers the same 404.
"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.estimate_request import RejectEstimateRequest
from src.app.services.event_publisher import EventPublisher
from src.app.services.notification_service import NotificationService
from src.app.services.payment_processor import PaymentProcessor
from src.app.use_cases.estimates import (
    SignEstimate,
    RejectEstimate,
    SignEstimateCommand,
    PublicEstimateView,
)
from src.app.use_cases.invoices import RecordPayment, PublicInvoiceView
from src.app.use_cases.public import (
    FetchEstimateByToken,
    FetchInvoiceByToken,
    SignEstimateByToken,
    RejectEstimateByToken,
    PayInvoice,
    PayInvoiceCommand,
    PayInvoiceResultDTO,
)
from src.adapter.repositories.estimate_repository import SqlAlchemyEstimateRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_payment_repository import SqlAlchemyInvoicePaymentRepository
from src.adapter.repositories.pending_payment_repository import SqlAlchemyPendingPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import (
    get_session,
    get_event_publisher,
    get_notification_service,
    get_payment_processor,
)
from src.api.error import raise_for_error

router = APIRouter(tags=["Public"])

NOT_FOUND_RESPONSE = {
    404: {
        "description": "Unknown token",
        "content": {
            "application/json": {
                "example": {
                    "error": {"code": "NOT_FOUND", "message": "Document not found"}
                }
            }
        }
    }
}


@router.get(
    "/view-estimate/{token}",
    response_model=PublicEstimateView,
    responses=NOT_FOUND_RESPONSE,
)
async def view_estimate(
    token: str,
    session: AsyncSession = Depends(get_session),
):
    """
    Client-facing estimate page data.

    The first view of a sent estimate stamps `read_at` for the owner.
    """
    use_case = FetchEstimateByToken(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=SqlAlchemyEstimateRepository(session),
    )
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/view-estimate/{token}/sign",
    response_model=PublicEstimateView,
    responses=NOT_FOUND_RESPONSE,
)
async def sign_estimate(
    token: str,
    request: SignEstimateCommand,
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
    event_publisher: EventPublisher = Depends(get_event_publisher),
):
    """
    Approve a sent estimate with an e-signature.

    Signing twice with the same signer returns the approved estimate again.

    **Returns:**
    - 200: Estimate approved
    - 400: Missing signer details, or the estimate cannot be signed
    - 404: Unknown token
    """
    estimate_repo = SqlAlchemyEstimateRepository(session)
    sign = SignEstimate(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=estimate_repo,
        notification_service=notification_service,
        event_publisher=event_publisher,
    )
    use_case = SignEstimateByToken(estimate_repo=estimate_repo, sign_estimate=sign)
    result = await use_case.execute(token, request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/view-estimate/{token}/reject",
    response_model=PublicEstimateView,
    responses=NOT_FOUND_RESPONSE,
)
async def reject_estimate(
    token: str,
    request: RejectEstimateRequest,
    session: AsyncSession = Depends(get_session),
    event_publisher: EventPublisher = Depends(get_event_publisher),
):
    estimate_repo = SqlAlchemyEstimateRepository(session)
    reject = RejectEstimate(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=estimate_repo,
        event_publisher=event_publisher,
    )
    use_case = RejectEstimateByToken(estimate_repo=estimate_repo, reject_estimate=reject)
    result = await use_case.execute(token, request.reason)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get(
    "/view-invoice/{token}",
    response_model=PublicInvoiceView,
    responses=NOT_FOUND_RESPONSE,
)
async def view_invoice(
    token: str,
    session: AsyncSession = Depends(get_session),
):
    use_case = FetchInvoiceByToken(SqlAlchemyInvoiceRepository(session))
    result = await use_case.execute(token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/view-invoice/{token}/pay",
    response_model=PayInvoiceResultDTO,
    responses={
        **NOT_FOUND_RESPONSE,
        202: {
            "description": "Processor outcome unknown, payment will be reconciled",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENT_PENDING",
                            "message": "Payment is being confirmed"
                        }
                    }
                }
            }
        },
        402: {"description": "Card declined"},
    }
)
async def pay_invoice(
    token: str,
    request: PayInvoiceCommand,
    session: AsyncSession = Depends(get_session),
    payment_processor: PaymentProcessor = Depends(get_payment_processor),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Charge the client's payment method and record the payment.

    Resubmitting the same `client_nonce` and amount never charges twice.

    **Returns:**
    - 200: `outcome` is `paid`, or `queued` when the charge succeeded and
      recording completes in the background
    - 202: Processor did not answer in time; the payment is reconciled later
    - 402: Declined
    - 404: Unknown token
    """
    uow = SqlAlchemyUnitOfWork(session)
    invoice_repo = SqlAlchemyInvoiceRepository(session)
    payment_repo = SqlAlchemyInvoicePaymentRepository(session)
    record_payment = RecordPayment(uow=uow, invoice_repo=invoice_repo, payment_repo=payment_repo)
    use_case = PayInvoice(
        uow=uow,
        invoice_repo=invoice_repo,
        payment_repo=payment_repo,
        pending_repo=SqlAlchemyPendingPaymentRepository(session),
        payment_processor=payment_processor,
        record_payment=record_payment,
        notification_service=notification_service,
        timeout_seconds=ApplicationConfig.PAYMENT_TIMEOUT_SECONDS,
        max_retries=ApplicationConfig.PAYMENT_MAX_RETRIES,
        backoff_seconds=ApplicationConfig.PAYMENT_RETRY_BACKOFF_SECONDS,
    )
    result = await use_case.execute(token, request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
