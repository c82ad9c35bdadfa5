"""DeleteEstimate Use Case"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.estimate_repository import EstimateRepository


class DeleteEstimate:
    """
    Use Case: Delete an estimate in any state

    Invoices converted from the estimate keep their own snapshot and are
    not touched.
    """

    def __init__(self, uow: UnitOfWork, estimate_repo: EstimateRepository):
        self.uow = uow
        self.estimate_repo = estimate_repo

    async def execute(self, owner_id: str, estimate_id: str) -> Result[None]:
        try:
            estimate = await self.estimate_repo.get_by_id(estimate_id, for_update=True)
            if not estimate or estimate.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Estimate {estimate_id} not found")
                )

            await self.estimate_repo.delete(estimate)
            await self.uow.commit()
            return Return.ok(None)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="DELETE_ESTIMATE_FAILED",
                    message="Failed to delete estimate",
                    reason=str(e),
                )
            )
