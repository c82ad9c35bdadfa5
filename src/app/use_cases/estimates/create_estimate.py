"""CreateEstimate Use Case

Creates a draft estimate from sanitized line items. The store issues the
public view token inside the same transaction.
"""

from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.event_publisher import EventPublisher
from src.app.repositories.estimate_repository import EstimateRepository
from src.domain.estimate import Estimate, EstimateStatus
from src.domain.line_item import (
    LineItemIntegrityError,
    sanitize_line_items,
    line_items_to_storage,
    document_total,
    quantize_money,
)
from .dtos import CreateEstimateInput, EstimateResponseDTO, to_estimate_response
from .publishing import publish_created


class CreateEstimate:
    """
    Use Case: Create an estimate

    Business Rules:
    1. At least one valid line item after sanitization
    2. total is derived, never taken from input
    3. New estimates start as draft
    4. The token returned is the one read back from the committed row

    Flow:
    1. Sanitize line items
    2. Compute total
    3. Persist (store assigns view_token)
    4. Commit
    5. Publish EstimateCreated (best effort)
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

    async def execute(self, command: CreateEstimateInput) -> Result[EstimateResponseDTO]:
        try:
            items = sanitize_line_items(command.line_items)
            if not items:
                return Return.err(
                    Error(
                        code="EMPTY_DOCUMENT",
                        message="Estimate needs at least one line item with a description and quantity",
                    )
                )

            estimate = Estimate(
                owner_id=command.owner_id,
                client_name=command.client_name.strip(),
                client_email=command.client_email.strip(),
                client_phone=command.client_phone.strip(),
                project_name=command.project_name.strip(),
                line_items=line_items_to_storage(items),
                tax_rate=command.tax_rate,
                deposit=quantize_money(command.deposit),
                total=document_total(items, command.tax_rate),
                status=EstimateStatus.DRAFT,
            )

            created = await self.estimate_repo.create(estimate)
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
                    code="CREATE_ESTIMATE_FAILED",
                    message="Failed to create estimate",
                    reason=str(e),
                )
            )

        await publish_created(self.event_publisher, created)
        return Return.ok(to_estimate_response(created))
