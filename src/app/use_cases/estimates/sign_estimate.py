"""SignEstimate Use Case

Client e-signature. The only path to an approved estimate.
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
from src.domain.estimate import Estimate, EstimateStatus
from .dtos import SignEstimateCommand, PublicEstimateView, to_public_estimate_view
from .publishing import publish_status_changed

logger = logging.getLogger(__name__)


def _same_signer(estimate: Estimate, signer_name: str, signer_email: str) -> bool:
    stored_name = (estimate.signed_by_name or "").strip().casefold()
    stored_email = (estimate.signed_by_email or "").strip().lower()
    return stored_name == signer_name.casefold() and stored_email == signer_email.lower()


class SignEstimate:
    """
    Use Case: Record a client signature

    Business Rules:
    1. Signer name, email and signature are all required
    2. sent -> approved through a conditional update, so two concurrent
       signatures cannot both win
    3. Re-signing an approved estimate with the same signer succeeds without
       changing anything; a different signer is a CONFLICT
    4. Draft and rejected estimates cannot be signed (CONFLICT)

    Flow:
    1. Validate inputs
    2. Conditional UPDATE ... WHERE status = 'sent'
    3. On no match, read the row to classify the outcome
    4. Commit, publish status change, notify (best effort)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        estimate_repo: EstimateRepository,
        notification_service: Optional[NotificationService] = None,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.uow = uow
        self.estimate_repo = estimate_repo
        self.notification_service = notification_service
        self.event_publisher = event_publisher

    async def execute(
        self, estimate_id: str, command: SignEstimateCommand
    ) -> Result[PublicEstimateView]:
        signer_name = command.signer_name.strip()
        signer_email = command.signer_email.strip()
        signature = command.signature.strip()

        if not signer_name or not signer_email or not signature:
            return Return.err(
                Error(
                    code="VALIDATION_ERROR",
                    message="Signer name, signer email and signature are required",
                )
            )
        if "@" not in signer_email:
            return Return.err(
                Error(code="VALIDATION_ERROR", message="Signer email is not valid")
            )

        try:
            signed = await self.estimate_repo.mark_signed(
                estimate_id,
                signed_by_name=signer_name,
                signed_by_email=signer_email,
                signature_ref=signature,
                signed_at=utc_now(),
            )

            if not signed:
                await self.uow.rollback()
                return await self._classify_unsigned(estimate_id, signer_name, signer_email)

            await self.uow.commit()
            estimate = await self.estimate_repo.get_by_id(estimate_id)

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="SIGN_ESTIMATE_FAILED",
                    message="Failed to sign estimate",
                    reason=str(e),
                )
            )

        await publish_status_changed(self.event_publisher, estimate)
        await self._notify(estimate)
        return Return.ok(to_public_estimate_view(estimate))

    async def _classify_unsigned(
        self, estimate_id: str, signer_name: str, signer_email: str
    ) -> Result[PublicEstimateView]:
        estimate = await self.estimate_repo.get_by_id(estimate_id)
        if not estimate:
            return Return.err(Error(code="NOT_FOUND", message="Estimate not found"))

        if estimate.status == EstimateStatus.APPROVED:
            if _same_signer(estimate, signer_name, signer_email):
                return Return.ok(to_public_estimate_view(estimate))
            return Return.err(
                Error(
                    code="CONFLICT",
                    message="Estimate was already signed by someone else",
                    reason=f"estimate_id={estimate_id}",
                )
            )

        return Return.err(
            Error(
                code="CONFLICT",
                message=f"Estimate cannot be signed while {estimate.status.value}",
                reason=f"estimate_id={estimate_id}, status={estimate.status.value}",
            )
        )

    async def _notify(self, estimate: Estimate) -> None:
        if not self.notification_service:
            return
        try:
            await self.notification_service.send(
                estimate.signed_by_email,
                NotificationTemplate.ESTIMATE_SIGNED,
                {
                    "clientName": estimate.client_name,
                    "projectName": estimate.project_name,
                    "signerName": estimate.signed_by_name,
                    "total": str(Decimal(estimate.total)),
                },
            )
        except Exception as e:
            logger.warning(f"Signed confirmation for estimate {estimate.id} failed: {e}")
