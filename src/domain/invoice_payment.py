"""Invoice Payment Domain Entity

Immutable append-only payment history of an invoice.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric, String, Text, CheckConstraint, DateTime
from src.domain.base import BaseModel, generate_uuid, utc_now


class InvoicePayment(BaseModel, table=True):
    """
    Invoice Payment - One recorded payment against an invoice

    Domain Rules:
    - amount > 0
    - Payments are immutable (append-only)
    - idempotency_key is unique when present (prevents double recording)
    """

    __tablename__ = "invoice_payments"
    __table_args__ = (
        CheckConstraint('amount > 0', name='payment_amount_positive'),
        Index('ix_invoice_payments_invoice_paid_at', 'invoice_id', 'paid_at'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Payment amount (must be > 0)"
    )

    note: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True, unique=True),
        description="Key derived from (invoice_id, amount, nonce) for processor payments"
    )

    processor_reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Payment processor reference (e.g., payment intent id)"
    )

    paid_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="When the payment was recorded"
    )
