"""Invoice Domain Entity

Tracks billing invoices and their payment state.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric, String, Text, Date, UniqueConstraint, DateTime
from src.domain.base import BaseModel, generate_uuid, utc_now
from src.domain.line_item import LineItem, sanitize_line_items, quantize_money


class InvoiceStatus(str, Enum):
    """Invoice status types, derived from amount_paid and total"""
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


def derive_invoice_status(amount_paid: Decimal, total: Decimal) -> InvoiceStatus:
    """
    The only place an invoice status is decided

    0 -> unpaid, 0 < paid < total -> partially_paid, paid >= total -> paid
    """
    if amount_paid <= 0:
        return InvoiceStatus.UNPAID
    if amount_paid < total:
        return InvoiceStatus.PARTIALLY_PAID
    return InvoiceStatus.PAID


class Invoice(BaseModel, table=True):
    """
    Invoice - Billing document, standalone or converted from an estimate

    Domain Rules:
    - invoice_number is unique per owner
    - amount_paid is the SUM of invoice_payments.amount, recomputed by the store
    - status = derive_invoice_status(amount_paid, total)
    - estimate_id is a snapshot reference; the estimate may be deleted later
    - view_token is issued once by the store and never changes
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_owner_created', 'owner_id', 'created_at'),
        Index('ix_invoices_view_token', 'view_token', unique=True),
        UniqueConstraint('owner_id', 'invoice_number', name='uq_invoices_owner_number'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique invoice identifier"
    )

    owner_id: str = Field(
        description="Owning account"
    )

    estimate_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), nullable=True),
        description="Source estimate, if converted (no cascade)"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Human readable number (e.g., INV-20240131-K3P9QZ)"
    )

    client_name: str = Field(
        sa_column=Column(String(200), nullable=False),
    )

    client_email: str = Field(
        default="",
        sa_column=Column(String(320), nullable=False, default=""),
    )

    client_phone: str = Field(
        default="",
        sa_column=Column(String(50), nullable=False, default=""),
    )

    project_name: str = Field(
        sa_column=Column(String(300), nullable=False),
    )

    line_items: List[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Sanitized line items in storage form"
    )

    tax_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(7, 3), nullable=False, default=0),
    )

    total: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Derived total including tax"
    )

    amount_paid: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Sum of recorded payments"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.UNPAID,
        description="Invoice status (unpaid, partially_paid, paid)"
    )

    issue_date: date = Field(
        default_factory=date.today,
        sa_column=Column(Date, nullable=False),
    )

    due_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    view_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=False),
        description="Public bearer token for /view-invoice/{token}"
    )

    sent_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Last update timestamp"
    )

    def get_line_items(self) -> List[LineItem]:
        return sanitize_line_items(self.line_items)

    @property
    def balance_due(self) -> Decimal:
        remaining = quantize_money(Decimal(self.total) - Decimal(self.amount_paid))
        return remaining if remaining > 0 else Decimal("0.00")

    def is_overdue(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return (
            self.due_date is not None
            and self.due_date < today
            and self.status != InvoiceStatus.PAID
        )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "0b7e6f1c-2d9a-4c4e-8a43-6f1f0f2d9d21",
                "owner_id": "owner_123",
                "estimate_id": None,
                "invoice_number": "INV-20240131-K3P9QZ",
                "client_name": "Jane Homeowner",
                "project_name": "Kitchen repaint",
                "tax_rate": "8.000",
                "total": "500.00",
                "amount_paid": "200.00",
                "status": "partially_paid",
                "issue_date": "2024-01-31",
            }
        }
