"""ListEstimates Use Case

Owner dashboard listing, newest first.
"""

from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.estimate_repository import EstimateRepository
from src.domain.estimate import EstimateStatus
from .dtos import ListEstimatesResponseDTO, to_estimate_response


class ListEstimates:
    def __init__(self, estimate_repo: EstimateRepository):
        self.estimate_repo = estimate_repo

    async def execute(
        self,
        owner_id: str,
        status: Optional[EstimateStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Result[ListEstimatesResponseDTO]:
        """
        Args:
            owner_id: Owning account
            status: Optional status filter
            limit: Page size (1-200)
            offset: Rows to skip

        Returns:
            Result[ListEstimatesResponseDTO]
        """
        if limit < 1 or limit > 200 or offset < 0:
            return Return.err(
                Error(code="VALIDATION_ERROR", message="limit must be 1-200 and offset >= 0")
            )

        try:
            estimates = await self.estimate_repo.get_by_owner(
                owner_id, status=status, limit=limit, offset=offset
            )
            return Return.ok(
                ListEstimatesResponseDTO(
                    estimates=[to_estimate_response(e) for e in estimates],
                    limit=limit,
                    offset=offset,
                )
            )
        except Exception as e:
            return Return.err(
                Error(
                    code="LIST_ESTIMATES_FAILED",
                    message="Failed to list estimates",
                    reason=str(e),
                )
            )
