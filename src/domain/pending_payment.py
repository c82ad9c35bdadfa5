"""Pending Payment Domain Entity

Reconciliation queue for processor payments that are not (yet) reflected in
an invoice's payment history.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Text, Integer, DateTime
from src.domain.base import BaseModel, generate_uuid, utc_now


class PendingPaymentState(str, Enum):
    """Reconciliation states"""
    UNKNOWN = "unknown"          # Processor outcome ambiguous (timeout)
    AUTHORIZED = "authorized"    # Processor moved money, local record failed
    RECORDED = "recorded"        # Reflected in invoice payment history
    FAILED = "failed"            # Processor reports no charge
    REFUND_REQUIRED = "refund_required"  # Captured, but the invoice can never accept it


OPEN_PENDING_PAYMENT_STATES = (PendingPaymentState.UNKNOWN, PendingPaymentState.AUTHORIZED)


class PendingPayment(BaseModel, table=True):
    """
    Pending Payment - Processor payment awaiting reconciliation

    Domain Rules:
    - One entry per idempotency_key
    - UNKNOWN entries are resolved by querying the processor, never by guessing
    - AUTHORIZED entries must eventually be recorded (money already moved)
    - REFUND_REQUIRED is terminal: the charge has to be returned by hand
    """

    __tablename__ = "pending_payments"
    __table_args__ = (
        Index('ix_pending_payments_state', 'state'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), nullable=False),
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
    )

    note: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    idempotency_key: str = Field(
        sa_column=Column(String(128), nullable=False, unique=True),
    )

    processor_reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
    )

    state: PendingPaymentState = Field(
        default=PendingPaymentState.UNKNOWN,
    )

    attempts: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )

    last_error: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
    )
