"""SignEstimateByToken Use Case

The token is the only identifier a signer supplies.
"""

from libs.result import Result, Return, Error
from src.app.repositories.estimate_repository import EstimateRepository
from src.app.use_cases.estimates.dtos import SignEstimateCommand, PublicEstimateView
from src.app.use_cases.estimates.sign_estimate import SignEstimate
from src.domain.estimate import EstimateStatus
from .errors import DOCUMENT_NOT_FOUND, is_well_formed_token, to_public_error


class SignEstimateByToken:
    def __init__(self, estimate_repo: EstimateRepository, sign_estimate: SignEstimate):
        self.estimate_repo = estimate_repo
        self.sign_estimate = sign_estimate

    async def execute(
        self, token: str, command: SignEstimateCommand
    ) -> Result[PublicEstimateView]:
        if not is_well_formed_token(token):
            return Return.err(DOCUMENT_NOT_FOUND)

        try:
            estimate = await self.estimate_repo.get_by_token(token)
        except Exception as e:
            return Return.err(
                to_public_error(
                    Error(code="SIGN_ESTIMATE_FAILED", message="Failed to load estimate", reason=str(e)),
                    context="sign_estimate",
                )
            )

        if not estimate or estimate.status == EstimateStatus.DRAFT:
            return Return.err(DOCUMENT_NOT_FOUND)

        estimate_id = estimate.id
        result = await self.sign_estimate.execute(estimate_id, command)
        if result.is_err():
            return Return.err(
                to_public_error(result.error, context=f"sign_estimate estimate_id={estimate_id}")
            )
        return result
