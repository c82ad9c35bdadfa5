"""Estimate API Routes

FastAPI routes for the owner side of the estimate lifecycle.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.schemas.estimate_request import CreateEstimateRequest
from src.api.schemas.invoice_request import ConvertEstimateRequest
from src.app.services.event_publisher import EventPublisher
from src.app.services.notification_service import NotificationService
from src.app.use_cases.estimates import (
    CreateEstimate,
    UpdateEstimate,
    MarkEstimateSent,
    DeleteEstimate,
    GetEstimate,
    ListEstimates,
    CreateEstimateInput,
    UpdateEstimateInput,
    EstimateResponseDTO,
    ListEstimatesResponseDTO,
)
from src.app.use_cases.invoices import (
    ConvertEstimateToInvoice,
    ConvertEstimateInput,
    InvoiceResponseDTO,
)
from src.adapter.repositories.estimate_repository import SqlAlchemyEstimateRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.domain.estimate import EstimateStatus
from src.depends import get_session, get_event_publisher, get_notification_service
from src.api.auth import get_owner_id
from src.api.error import raise_for_error

router = APIRouter(prefix="/estimates", tags=["Estimates"])


@router.post(
    "",
    response_model=EstimateResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "No valid line items",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "EMPTY_DOCUMENT",
                            "message": "Estimate needs at least one line item with a description and quantity"
                        }
                    }
                }
            }
        }
    }
)
async def create_estimate(
    request: CreateEstimateRequest,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    event_publisher: EventPublisher = Depends(get_event_publisher),
):
    """
    Create a draft estimate.

    Line items are sanitized: rows without a description or with a
    non-positive quantity are dropped and every row total is recomputed.
    The response carries the `view_token` for the public estimate page.
    """
    use_case = CreateEstimate(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=SqlAlchemyEstimateRepository(session),
        event_publisher=event_publisher,
    )
    result = await use_case.execute(
        CreateEstimateInput(owner_id=owner_id, **request.model_dump())
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("", response_model=ListEstimatesResponseDTO)
async def list_estimates(
    status_filter: Optional[EstimateStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = ListEstimates(SqlAlchemyEstimateRepository(session))
    result = await use_case.execute(owner_id, status=status_filter, limit=limit, offset=offset)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/{estimate_id}", response_model=EstimateResponseDTO)
async def get_estimate(
    estimate_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = GetEstimate(SqlAlchemyEstimateRepository(session))
    result = await use_case.execute(owner_id, estimate_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch(
    "/{estimate_id}",
    response_model=EstimateResponseDTO,
    responses={
        409: {
            "description": "Estimate already approved",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "CONFLICT",
                            "message": "Approved estimates cannot be edited"
                        }
                    }
                }
            }
        }
    }
)
async def update_estimate(
    estimate_id: str,
    request: UpdateEstimateInput,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    event_publisher: EventPublisher = Depends(get_event_publisher),
):
    """
    Edit an estimate that is not approved yet.

    Status and view token are unchanged; the total is re-derived.
    """
    use_case = UpdateEstimate(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=SqlAlchemyEstimateRepository(session),
        event_publisher=event_publisher,
    )
    result = await use_case.execute(owner_id, estimate_id, request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/{estimate_id}/send", response_model=EstimateResponseDTO)
async def send_estimate(
    estimate_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
    notification_service: NotificationService = Depends(get_notification_service),
    event_publisher: EventPublisher = Depends(get_event_publisher),
):
    """
    Email the public estimate link to the client and mark the estimate sent.

    **Returns:**
    - 200: Estimate sent
    - 400: Client email missing
    - 409: Estimate already approved or rejected
    - 502: Email could not be delivered (estimate unchanged)
    """
    use_case = MarkEstimateSent(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=SqlAlchemyEstimateRepository(session),
        notification_service=notification_service,
        public_base_url=ApplicationConfig.PUBLIC_BASE_URL,
        event_publisher=event_publisher,
    )
    result = await use_case.execute(owner_id, estimate_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/{estimate_id}/convert",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def convert_estimate(
    estimate_id: str,
    request: Optional[ConvertEstimateRequest] = None,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    """
    Create an invoice from an approved estimate.

    The invoice keeps its own copy of client, project and line items.
    """
    request = request or ConvertEstimateRequest()
    use_case = ConvertEstimateToInvoice(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=SqlAlchemyEstimateRepository(session),
        invoice_repo=SqlAlchemyInvoiceRepository(session),
        number_max_attempts=ApplicationConfig.INVOICE_NUMBER_MAX_ATTEMPTS,
    )
    result = await use_case.execute(
        estimate_id, ConvertEstimateInput(owner_id=owner_id, **request.model_dump())
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete("/{estimate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_estimate(
    estimate_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = DeleteEstimate(
        uow=SqlAlchemyUnitOfWork(session),
        estimate_repo=SqlAlchemyEstimateRepository(session),
    )
    result = await use_case.execute(owner_id, estimate_id)

    if result.is_err():
        raise_for_error(result.error)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
