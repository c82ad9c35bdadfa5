"""SQLAlchemy Estimate Repository Implementation

Implements estimate persistence using SQLAlchemy async session.
"""

from datetime import datetime
from typing import Any, Dict, Optional, List
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.estimate_repository import EstimateRepository
from src.domain.base import generate_view_token, utc_now
from src.domain.estimate import Estimate, EstimateStatus


class SqlAlchemyEstimateRepository(EstimateRepository):
    """
    SQLAlchemy implementation of EstimateRepository

    Features:
    - Token issued inside the insert transaction and read back after flush
    - Owner edits and sends are conditional UPDATEs on the current status
    - Conditional UPDATE ... WHERE status = 'sent' for public transitions
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, estimate: Estimate) -> Estimate:
        if not estimate.view_token:
            estimate.view_token = generate_view_token()
        self.session.add(estimate)
        await self.session.flush()
        await self.session.refresh(estimate)
        return estimate

    async def get_by_id(self, estimate_id: str, for_update: bool = False) -> Optional[Estimate]:
        stmt = (
            select(Estimate)
            .where(Estimate.id == estimate_id)
            .execution_options(populate_existing=True)
        )

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_owner(
        self,
        owner_id: str,
        status: Optional[EstimateStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Estimate]:
        stmt = select(Estimate).where(Estimate.owner_id == owner_id)

        if status:
            stmt = stmt.where(Estimate.status == status)

        stmt = stmt.order_by(Estimate.created_at.desc())
        stmt = stmt.limit(limit).offset(offset)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_token(self, view_token: str) -> Optional[Estimate]:
        stmt = (
            select(Estimate)
            .where(Estimate.view_token == view_token)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, estimate: Estimate) -> Estimate:
        estimate.updated_at = utc_now()
        self.session.add(estimate)
        await self.session.flush()
        await self.session.refresh(estimate)
        return estimate

    async def delete(self, estimate: Estimate) -> None:
        await self.session.delete(estimate)
        await self.session.flush()

    async def update_unless_approved(
        self, estimate_id: str, changes: Dict[str, Any]
    ) -> Optional[Estimate]:
        stmt = (
            update(Estimate)
            .where(Estimate.id == estimate_id)
            .where(Estimate.status != EstimateStatus.APPROVED)
            .values(**changes, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.get_by_id(estimate_id)

    async def mark_sent(self, estimate_id: str, sent_at: datetime) -> bool:
        stmt = (
            update(Estimate)
            .where(Estimate.id == estimate_id)
            .where(Estimate.status.in_((EstimateStatus.DRAFT, EstimateStatus.SENT)))
            .values(status=EstimateStatus.SENT, sent_at=sent_at, updated_at=sent_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_signed(
        self,
        estimate_id: str,
        signed_by_name: str,
        signed_by_email: str,
        signature_ref: str,
        signed_at: datetime,
    ) -> bool:
        stmt = (
            update(Estimate)
            .where(Estimate.id == estimate_id)
            .where(Estimate.status == EstimateStatus.SENT)
            .values(
                status=EstimateStatus.APPROVED,
                signed_at=signed_at,
                signed_by_name=signed_by_name,
                signed_by_email=signed_by_email,
                signature_ref=signature_ref,
                updated_at=signed_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_rejected(
        self, estimate_id: str, reason: Optional[str], rejected_at: datetime
    ) -> bool:
        stmt = (
            update(Estimate)
            .where(Estimate.id == estimate_id)
            .where(Estimate.status == EstimateStatus.SENT)
            .values(
                status=EstimateStatus.REJECTED,
                rejected_at=rejected_at,
                rejection_reason=reason,
                updated_at=rejected_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_read(self, estimate_id: str, read_at: datetime) -> bool:
        stmt = (
            update(Estimate)
            .where(Estimate.id == estimate_id)
            .where(Estimate.read_at.is_(None))
            .values(read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
