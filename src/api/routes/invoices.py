"""Invoice API Routes

FastAPI routes for the owner side of the invoice lifecycle.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.invoice_request import CreateInvoiceRequest, RecordPaymentRequest
from src.app.services.notification_service import NotificationService
from src.app.use_cases.invoices import (
    CreateInvoice,
    UpdateInvoice,
    RecordPayment,
    MarkInvoiceSent,
    DeleteInvoice,
    GetInvoice,
    ListInvoices,
    CreateInvoiceInput,
    UpdateInvoiceInput,
    RecordPaymentCommand,
    InvoiceResponseDTO,
    ListInvoicesResponseDTO,
)
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_payment_repository import SqlAlchemyInvoicePaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.invoice import InvoiceStatus
from src.domain.line_item import quantize_money
from src.depends import get_session, get_notification_service
from src.api.auth import get_owner_id
from src.api.error import raise_for_error

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post("", response_model=InvoiceResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    request: CreateInvoiceRequest,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Create a standalone invoice.

    The invoice number (`INV-YYYYMMDD-XXXXXX`) and public `view_token` are
    assigned by the service.
    """
    use_case = CreateInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        number_max_attempts=ApplicationConfig.INVOICE_NUMBER_MAX_ATTEMPTS,
    )
    result = await use_case.execute(
        CreateInvoiceInput(owner_id=owner_id, **request.model_dump())
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("", response_model=ListInvoicesResponseDTO)
async def list_invoices(
    status_filter: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListInvoices(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
    )
    result = await use_case.execute(owner_id, status=status_filter, limit=limit, offset=offset)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{invoice_id}", response_model=InvoiceResponseDTO)
async def get_invoice(
    invoice_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoicePaymentRepository(session),
    )
    result = await use_case.execute(owner_id, invoice_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch("/{invoice_id}", response_model=InvoiceResponseDTO)
async def update_invoice(
    invoice_id: str,
    request: UpdateInvoiceInput,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Edit an invoice.

    Line items and tax rate are frozen once a payment was recorded (409).
    """
    use_case = UpdateInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyInvoicePaymentRepository(session),
    )
    result = await use_case.execute(owner_id, invoice_id, request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{invoice_id}/payments",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Invoice already paid or payment exceeds balance",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CONFLICT",
                            "message": "Payment of 600.00 exceeds balance due of 500.00"
                        }
                    }
                }
            }
        }
    }
)
async def record_payment(
    invoice_id: str,
    request: RecordPaymentRequest,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Record a payment received outside the processor (cash, check, transfer).

    Repeating a request with the same `idempotency_key` returns the current
    invoice without recording a second payment.
    """
    use_case = RecordPayment(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyInvoicePaymentRepository(session),
    )
    command = RecordPaymentCommand(
        amount=quantize_money(request.amount),
        note=request.note,
        idempotency_key=request.idempotency_key,
    )
    result = await use_case.execute(invoice_id, command, owner_id=owner_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/{invoice_id}/send", response_model=InvoiceResponseDTO)
async def send_invoice(
    invoice_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
):
    use_case = MarkInvoiceSent(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyInvoicePaymentRepository(session),
        notification_service=notification_service,
        public_base_url=ApplicationConfig.PUBLIC_BASE_URL,
    )
    result = await use_case.execute(owner_id, invoice_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = DeleteInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        payment_repo=SqlAlchemyInvoicePaymentRepository(session),
    )
    result = await use_case.execute(owner_id, invoice_id)

    if result.is_err():
        raise_for_error(result.error)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
