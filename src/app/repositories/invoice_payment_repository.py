"""Invoice Payment Repository Interface

Defines the contract for invoice payment persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Optional, List
from src.domain.invoice_payment import InvoicePayment


class InvoicePaymentRepository(ABC):
    """
    Repository interface for InvoicePayment persistence

    Payments are immutable and append-only.
    Idempotency is enforced via unique idempotency_key.
    """

    @abstractmethod
    async def create(self, payment: InvoicePayment) -> InvoicePayment:
        """
        Append a payment

        Raises:
            IntegrityError: If idempotency_key already exists
        """
        pass

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: str) -> List[InvoicePayment]:
        """Payment history of an invoice, oldest first"""
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[InvoicePayment]:
        pass

    @abstractmethod
    async def count_by_invoice_id(self, invoice_id: str) -> int:
        pass
