"""GetEstimate Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.estimate_repository import EstimateRepository
from .dtos import EstimateResponseDTO, to_estimate_response


class GetEstimate:
    def __init__(self, estimate_repo: EstimateRepository):
        self.estimate_repo = estimate_repo

    async def execute(self, owner_id: str, estimate_id: str) -> Result[EstimateResponseDTO]:
        try:
            estimate = await self.estimate_repo.get_by_id(estimate_id)
            if not estimate or estimate.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Estimate {estimate_id} not found")
                )
            return Return.ok(to_estimate_response(estimate))

        except Exception as e:
            return Return.err(
                Error(
                    code="GET_ESTIMATE_FAILED",
                    message="Failed to load estimate",
                    reason=str(e),
                )
            )
