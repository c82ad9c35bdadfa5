"""Best-effort publication of estimate events after commit"""

import logging
from decimal import Decimal
from typing import Optional
from src.app.services.event_publisher import EventPublisher
from src.domain.estimate import Estimate
from src.domain.events import EstimateCreated, EstimateStatusChanged

logger = logging.getLogger(__name__)


async def publish_status_changed(
    event_publisher: Optional[EventPublisher], estimate: Estimate
) -> None:
    if not event_publisher:
        return
    try:
        await event_publisher.publish(
            EstimateStatusChanged(
                estimate_id=estimate.id,
                owner_id=estimate.owner_id,
                status=estimate.status.value,
                total=Decimal(estimate.total),
                client_name=estimate.client_name,
                project_name=estimate.project_name,
            )
        )
    except Exception as e:
        logger.warning(f"Failed to publish EstimateStatusChanged for {estimate.id}: {e}")


async def publish_created(
    event_publisher: Optional[EventPublisher], estimate: Estimate
) -> None:
    if not event_publisher:
        return
    try:
        await event_publisher.publish(
            EstimateCreated(
                estimate_id=estimate.id,
                owner_id=estimate.owner_id,
                client_name=estimate.client_name,
                project_name=estimate.project_name,
                status=estimate.status.value,
                total=Decimal(estimate.total),
            )
        )
    except Exception as e:
        logger.warning(f"Failed to publish EstimateCreated for {estimate.id}: {e}")
