"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, List
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Payment totals are never written from application memory: after a
    payment is appended, apply_payment_totals recomputes amount_paid with a
    SQL aggregate guarded by the invoice total.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Persist a new invoice

        Issues a view_token when the entity carries none.

        Args:
            invoice: Invoice entity to persist

        Returns:
            The persisted Invoice, including the stored view_token
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: str, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_owner(
        self,
        owner_id: str,
        status: Optional[InvoiceStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Invoice]:
        """
        Retrieve invoices of an owner, newest first

        Args:
            owner_id: Owning account
            status: Optional filter by status
            limit: Maximum number of invoices to return
            offset: Offset for pagination

        Returns:
            List of invoices
        """
        pass

    @abstractmethod
    async def get_by_token(self, view_token: str) -> Optional[Invoice]:
        """Retrieve invoice by public view token"""
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        pass

    @abstractmethod
    async def delete(self, invoice: Invoice) -> bool:
        """
        Delete an invoice, only while no payment row exists

        Returns:
            True if deleted, False if a payment was recorded against it
        """
        pass

    @abstractmethod
    async def invoice_number_exists(self, owner_id: str, invoice_number: str) -> bool:
        """
        Check whether an owner already uses an invoice number

        Args:
            owner_id: Owning account
            invoice_number: Candidate invoice number

        Returns:
            True if taken, False otherwise
        """
        pass

    @abstractmethod
    async def update_fields(
        self, invoice_id: str, changes: Dict[str, Any], require_no_payments: bool = False
    ) -> Optional[Invoice]:
        """
        Apply column changes with a single conditional UPDATE

        Args:
            invoice_id: Invoice ID
            changes: Column values to write
            require_no_payments: Only write while no payment row exists

        Returns:
            Updated Invoice, or None if the condition no longer held
        """
        pass

    @abstractmethod
    async def apply_payment_totals(self, invoice_id: str) -> Optional[Invoice]:
        """
        Recompute amount_paid and status from recorded payments

        The write is conditional on the payment sum not exceeding the total,
        evaluated by the database at write time, so concurrent payments can
        never push an invoice past its total.

        Args:
            invoice_id: Invoice ID

        Returns:
            Updated Invoice, or None if the payments would overpay it
        """
        pass
