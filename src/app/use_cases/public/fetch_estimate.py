"""FetchEstimateByToken Use Case"""

import logging
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.estimate_repository import EstimateRepository
from src.app.use_cases.estimates.dtos import PublicEstimateView, to_public_estimate_view
from src.domain.base import utc_now
from src.domain.estimate import EstimateStatus
from .errors import DOCUMENT_NOT_FOUND, is_well_formed_token, to_public_error

logger = logging.getLogger(__name__)


class FetchEstimateByToken:
    """
    Use Case: Public estimate view

    Business Rules:
    1. Malformed token, unknown token and draft estimates are indistinguishable
    2. The first view of a sent estimate records read_at (best effort)
    """

    def __init__(self, uow: UnitOfWork, estimate_repo: EstimateRepository):
        self.uow = uow
        self.estimate_repo = estimate_repo

    async def execute(self, token: str) -> Result[PublicEstimateView]:
        if not is_well_formed_token(token):
            return Return.err(DOCUMENT_NOT_FOUND)

        try:
            estimate = await self.estimate_repo.get_by_token(token)
            if not estimate or estimate.status == EstimateStatus.DRAFT:
                return Return.err(DOCUMENT_NOT_FOUND)

            view = to_public_estimate_view(estimate)
            if estimate.status == EstimateStatus.SENT and estimate.read_at is None:
                await self._mark_read(estimate.id)

            return Return.ok(view)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                to_public_error(
                    Error(code="FETCH_ESTIMATE_FAILED", message="Failed to load estimate", reason=str(e)),
                    context="fetch_estimate",
                )
            )

    async def _mark_read(self, estimate_id: str) -> None:
        try:
            await self.estimate_repo.mark_read(estimate_id, utc_now())
            await self.uow.commit()
        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Could not record read receipt for estimate {estimate_id}: {e}")
