"""MarkEstimateSent Use Case

Emails the client a link to the public estimate page and moves the
estimate to sent.
"""

import logging
from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.services.notification_service import NotificationService, NotificationTemplate
from src.app.repositories.estimate_repository import EstimateRepository
from src.domain.base import utc_now
from .dtos import EstimateResponseDTO, to_estimate_response
from .publishing import publish_status_changed

logger = logging.getLogger(__name__)


class MarkEstimateSent:
    """
    Use Case: Send an estimate to its client

    Business Rules:
    1. client_email is required
    2. Allowed from draft or sent (resend refreshes sent_at)
    3. Approved and rejected estimates cannot be re-sent (CONFLICT)
    4. The estimate is only marked sent when the message was accepted
    5. The transition is a conditional UPDATE applied after delivery, so a
       signature that lands while the message is in flight wins
    """

    def __init__(
        self,
        uow: UnitOfWork,
        estimate_repo: EstimateRepository,
        notification_service: NotificationService,
        public_base_url: str,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.uow = uow
        self.estimate_repo = estimate_repo
        self.notification_service = notification_service
        self.public_base_url = public_base_url.rstrip("/")
        self.event_publisher = event_publisher

    async def execute(self, owner_id: str, estimate_id: str) -> Result[EstimateResponseDTO]:
        try:
            estimate = await self.estimate_repo.get_by_id(estimate_id)
            if not estimate or estimate.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Estimate {estimate_id} not found")
                )

            if not estimate.client_email:
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="VALIDATION_ERROR",
                        message="Client email is required to send an estimate",
                    )
                )

            if estimate.is_terminal:
                return await self._terminal_conflict(estimate.status.value)

            # No row lock is held while the message goes out
            delivered = await self.notification_service.send(
                estimate.client_email,
                NotificationTemplate.ESTIMATE_SENT,
                {
                    "clientName": estimate.client_name,
                    "projectName": estimate.project_name,
                    "total": str(Decimal(estimate.total)),
                    "estimateUrl": f"{self.public_base_url}/view-estimate/{estimate.view_token}",
                },
            )
            if not delivered:
                logger.warning(f"Estimate {estimate_id} email was not accepted for delivery")
                await self.uow.rollback()
                return Return.err(
                    Error(
                        code="UPSTREAM_ERROR",
                        message="Estimate email could not be delivered",
                    )
                )

            if not await self.estimate_repo.mark_sent(estimate_id, utc_now()):
                current = await self.estimate_repo.get_by_id(estimate_id)
                current_status = current.status.value if current else "deleted"
                logger.warning(
                    f"Estimate {estimate_id} was emailed but became {current_status} meanwhile"
                )
                return await self._terminal_conflict(current_status)

            updated = await self.estimate_repo.get_by_id(estimate_id)
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SEND_ESTIMATE_FAILED",
                    message="Failed to send estimate",
                    reason=str(e),
                )
            )

        await publish_status_changed(self.event_publisher, updated)
        return Return.ok(to_estimate_response(updated))

    async def _terminal_conflict(self, current_status: str) -> Result[EstimateResponseDTO]:
        await self.uow.rollback()
        return Return.err(
            Error(
                code="CONFLICT",
                message=f"Estimate is already {current_status}",
                reason=f"status={current_status}",
            )
        )
