"""Pending Payment Repository Interface

Defines the contract for the payment reconciliation queue.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.pending_payment import PendingPayment


class PendingPaymentRepository(ABC):
    """
    Repository interface for PendingPayment persistence

    Entries are keyed by the processor idempotency key so the same charge is
    never queued twice.
    """

    @abstractmethod
    async def create(self, pending: PendingPayment) -> PendingPayment:
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[PendingPayment]:
        pass

    @abstractmethod
    async def get_open(self, limit: int = 100) -> List[PendingPayment]:
        """
        Retrieve entries still awaiting reconciliation (UNKNOWN or AUTHORIZED)

        Args:
            limit: Maximum number of entries to return

        Returns:
            Oldest open entries first
        """
        pass

    @abstractmethod
    async def update(self, pending: PendingPayment) -> PendingPayment:
        pass
