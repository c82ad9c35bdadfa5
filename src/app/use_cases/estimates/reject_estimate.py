"""RejectEstimate Use Case

Client declines an estimate from the public page.
"""

from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.repositories.estimate_repository import EstimateRepository
from src.domain.base import utc_now
from src.domain.estimate import EstimateStatus
from .dtos import PublicEstimateView, to_public_estimate_view
from .publishing import publish_status_changed


class RejectEstimate:
    """
    Use Case: Reject an estimate

    Business Rules:
    1. sent -> rejected through a conditional update
    2. Rejecting an already rejected estimate is a no-op success
    3. Draft and approved estimates cannot be rejected (CONFLICT)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        estimate_repo: EstimateRepository,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.uow = uow
        self.estimate_repo = estimate_repo
        self.event_publisher = event_publisher

    async def execute(
        self, estimate_id: str, reason: Optional[str] = None
    ) -> Result[PublicEstimateView]:
        reason = reason.strip() if reason and reason.strip() else None

        try:
            rejected = await self.estimate_repo.mark_rejected(
                estimate_id, reason=reason, rejected_at=utc_now()
            )

            if not rejected:
                await self.uow.rollback()
                estimate = await self.estimate_repo.get_by_id(estimate_id)
                if not estimate:
                    return Return.err(Error(code="NOT_FOUND", message="Estimate not found"))
                if estimate.status == EstimateStatus.REJECTED:
                    return Return.ok(to_public_estimate_view(estimate))
                return Return.err(
                    Error(
                        code="CONFLICT",
                        message=f"Estimate cannot be rejected while {estimate.status.value}",
                        reason=f"estimate_id={estimate_id}, status={estimate.status.value}",
                    )
                )

            await self.uow.commit()
            estimate = await self.estimate_repo.get_by_id(estimate_id)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="REJECT_ESTIMATE_FAILED",
                    message="Failed to reject estimate",
                    reason=str(e),
                )
            )

        await publish_status_changed(self.event_publisher, estimate)
        return Return.ok(to_public_estimate_view(estimate))
