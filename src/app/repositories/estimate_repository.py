"""Estimate Repository Interface

Defines the contract for estimate persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional, List
from src.domain.estimate import Estimate, EstimateStatus


class EstimateRepository(ABC):
    """
    Repository interface for Estimate persistence

    Owner edits lock the row (SELECT FOR UPDATE). Public sign/reject
    transitions are conditional updates so they can never overwrite a
    concurrent owner change with a stale status.
    """

    @abstractmethod
    async def create(self, estimate: Estimate) -> Estimate:
        """
        Persist a new estimate

        Issues a view_token when the entity carries none.

        Args:
            estimate: Estimate entity to persist

        Returns:
            The persisted Estimate, including the stored view_token
        """
        pass

    @abstractmethod
    async def get_by_id(self, estimate_id: str, for_update: bool = False) -> Optional[Estimate]:
        """
        Retrieve estimate by ID

        Args:
            estimate_id: Estimate ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Estimate if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_owner(
        self,
        owner_id: str,
        status: Optional[EstimateStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Estimate]:
        """
        Retrieve estimates of an owner, newest first

        Args:
            owner_id: Owning account
            status: Optional filter by status
            limit: Maximum number of estimates to return
            offset: Offset for pagination

        Returns:
            List of estimates
        """
        pass

    @abstractmethod
    async def get_by_token(self, view_token: str) -> Optional[Estimate]:
        """
        Retrieve estimate by public view token

        Args:
            view_token: Public bearer token

        Returns:
            Estimate if found, None otherwise
        """
        pass

    @abstractmethod
    async def update(self, estimate: Estimate) -> Estimate:
        """Persist changes to an existing estimate"""
        pass

    @abstractmethod
    async def delete(self, estimate: Estimate) -> None:
        pass

    @abstractmethod
    async def update_unless_approved(
        self, estimate_id: str, changes: Dict[str, Any]
    ) -> Optional[Estimate]:
        """
        Apply owner edits, only if the estimate is not approved

        Args:
            estimate_id: Estimate ID
            changes: Column values to write

        Returns:
            Updated Estimate, or None if it was approved in the meantime
        """
        pass

    @abstractmethod
    async def mark_sent(self, estimate_id: str, sent_at: datetime) -> bool:
        """
        Move an estimate to sent, only from draft or sent

        Returns:
            True if the row transitioned, False if it became approved or rejected
        """
        pass

    @abstractmethod
    async def mark_signed(
        self,
        estimate_id: str,
        signed_by_name: str,
        signed_by_email: str,
        signature_ref: str,
        signed_at: datetime,
    ) -> bool:
        """
        Approve an estimate, only if it is currently sent

        Args:
            estimate_id: Estimate ID
            signed_by_name: Signer's name
            signed_by_email: Signer's email
            signature_ref: Stored signature artifact reference
            signed_at: Signature timestamp

        Returns:
            True if the row transitioned, False if its status was not sent
        """
        pass

    @abstractmethod
    async def mark_rejected(
        self, estimate_id: str, reason: Optional[str], rejected_at: datetime
    ) -> bool:
        """
        Reject an estimate, only if it is currently sent

        Returns:
            True if the row transitioned, False if its status was not sent
        """
        pass

    @abstractmethod
    async def mark_read(self, estimate_id: str, read_at: datetime) -> bool:
        """Record the first public view; no-op once read_at is set"""
        pass
