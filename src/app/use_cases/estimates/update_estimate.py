"""UpdateEstimate Use Case

Owner edits of an estimate that has not been approved yet.
"""

from decimal import Decimal
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.repositories.estimate_repository import EstimateRepository
from src.domain.estimate import EstimateStatus
from src.domain.line_item import (
    LineItemIntegrityError,
    sanitize_line_items,
    line_items_to_storage,
    document_total,
    quantize_money,
)
from .dtos import UpdateEstimateInput, EstimateResponseDTO, to_estimate_response
from .publishing import publish_status_changed


class UpdateEstimate:
    """
    Use Case: Update an estimate

    Business Rules:
    1. Only the owner can edit; other owners get NOT_FOUND
    2. Approved estimates are frozen (CONFLICT)
    3. Supplied line items are re-sanitized and must not come out empty
    4. total is re-derived; status and view_token never change here
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
        self, owner_id: str, estimate_id: str, command: UpdateEstimateInput
    ) -> Result[EstimateResponseDTO]:
        try:
            estimate = await self.estimate_repo.get_by_id(estimate_id)
            if not estimate or estimate.owner_id != owner_id:
                return Return.err(
                    Error(code="NOT_FOUND", message=f"Estimate {estimate_id} not found")
                )

            if estimate.status == EstimateStatus.APPROVED:
                await self.uow.rollback()
                return self._approved_conflict()

            changes = {}
            if command.line_items is not None:
                items = sanitize_line_items(command.line_items)
                if not items:
                    await self.uow.rollback()
                    return Return.err(
                        Error(
                            code="EMPTY_DOCUMENT",
                            message="Estimate needs at least one line item with a description and quantity",
                        )
                    )
                changes["line_items"] = line_items_to_storage(items)
            else:
                items = estimate.get_line_items()

            if command.client_name is not None:
                changes["client_name"] = command.client_name.strip()
            if command.client_email is not None:
                changes["client_email"] = command.client_email.strip()
            if command.client_phone is not None:
                changes["client_phone"] = command.client_phone.strip()
            if command.project_name is not None:
                changes["project_name"] = command.project_name.strip()
            if command.deposit is not None:
                changes["deposit"] = quantize_money(command.deposit)
            if command.tax_rate is not None:
                changes["tax_rate"] = command.tax_rate

            tax_rate = Decimal(changes.get("tax_rate", estimate.tax_rate))
            changes["total"] = document_total(items, tax_rate)

            # A signature may have landed since the read above
            updated = await self.estimate_repo.update_unless_approved(estimate_id, changes)
            if updated is None:
                await self.uow.rollback()
                return self._approved_conflict()

            await self.uow.commit()

        except LineItemIntegrityError as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="INTEGRITY_ERROR", message="Line items failed integrity check", reason=str(e))
            )
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_ESTIMATE_FAILED",
                    message="Failed to update estimate",
                    reason=str(e),
                )
            )

        await publish_status_changed(self.event_publisher, updated)
        return Return.ok(to_estimate_response(updated))

    @staticmethod
    def _approved_conflict() -> Result[EstimateResponseDTO]:
        return Return.err(
            Error(
                code="CONFLICT",
                message="Approved estimates cannot be edited",
                reason="status=approved",
            )
        )
