"""RejectEstimateByToken Use Case"""

from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.estimate_repository import EstimateRepository
from src.app.use_cases.estimates.dtos import PublicEstimateView
from src.app.use_cases.estimates.reject_estimate import RejectEstimate
from src.domain.estimate import EstimateStatus
from .errors import DOCUMENT_NOT_FOUND, is_well_formed_token, to_public_error


class RejectEstimateByToken:
    def __init__(self, estimate_repo: EstimateRepository, reject_estimate: RejectEstimate):
        self.estimate_repo = estimate_repo
        self.reject_estimate = reject_estimate

    async def execute(
        self, token: str, reason: Optional[str] = None
    ) -> Result[PublicEstimateView]:
        if not is_well_formed_token(token):
            return Return.err(DOCUMENT_NOT_FOUND)

        try:
            estimate = await self.estimate_repo.get_by_token(token)
        except Exception as e:
            return Return.err(
                to_public_error(
                    Error(code="REJECT_ESTIMATE_FAILED", message="Failed to load estimate", reason=str(e)),
                    context="reject_estimate",
                )
            )

        if not estimate or estimate.status == EstimateStatus.DRAFT:
            return Return.err(DOCUMENT_NOT_FOUND)

        estimate_id = estimate.id
        result = await self.reject_estimate.execute(estimate_id, reason)
        if result.is_err():
            return Return.err(
                to_public_error(result.error, context=f"reject_estimate estimate_id={estimate_id}")
            )
        return result
