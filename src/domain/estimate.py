"""Estimate Domain Entity

A priced proposal an owner sends to a client for e-signature.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import JSON, Numeric, String, Text, DateTime
from src.domain.base import BaseModel, generate_uuid, utc_now
from src.domain.line_item import LineItem, sanitize_line_items


class EstimateStatus(str, Enum):
    """Estimate status types"""
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"    # Terminal, only via public signature
    REJECTED = "rejected"    # Terminal, only via public rejection


TERMINAL_ESTIMATE_STATUSES = frozenset({EstimateStatus.APPROVED, EstimateStatus.REJECTED})


class Estimate(BaseModel, table=True):
    """
    Estimate - Proposed quote awaiting client approval

    Domain Rules:
    - view_token is issued once by the store and never changes
    - total = subtotal(line_items) * (1 + tax_rate / 100), recomputed on save
    - Status transitions: draft -> sent -> approved | rejected
    - approved is only reachable through the public sign action
    """

    __tablename__ = "estimates"
    __table_args__ = (
        Index('ix_estimates_owner_created', 'owner_id', 'created_at'),
        Index('ix_estimates_view_token', 'view_token', unique=True),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique estimate identifier"
    )

    owner_id: str = Field(
        description="Owning account"
    )

    client_name: str = Field(
        sa_column=Column(String(200), nullable=False),
        description="Client display name"
    )

    client_email: str = Field(
        default="",
        sa_column=Column(String(320), nullable=False, default=""),
        description="Client email (required before sending)"
    )

    client_phone: str = Field(
        default="",
        sa_column=Column(String(50), nullable=False, default=""),
        description="Client phone"
    )

    project_name: str = Field(
        sa_column=Column(String(300), nullable=False),
        description="Project name"
    )

    line_items: List[dict] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Sanitized line items in storage form"
    )

    tax_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(7, 3), nullable=False, default=0),
        description="Tax rate in percent"
    )

    deposit: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Requested deposit"
    )

    total: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Derived total including tax"
    )

    status: EstimateStatus = Field(
        default=EstimateStatus.DRAFT,
        description="Estimate status (draft, sent, approved, rejected)"
    )

    view_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=False),
        description="Public bearer token for /view-estimate/{token}"
    )

    sent_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    read_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    signed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    signed_by_name: Optional[str] = Field(
        default=None,
        sa_column=Column(String(200), nullable=True)
    )

    signed_by_email: Optional[str] = Field(
        default=None,
        sa_column=Column(String(320), nullable=True)
    )

    signature_ref: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Reference to the stored signature artifact"
    )

    rejected_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    rejection_reason: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Estimate creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        description="Last update timestamp"
    )

    def get_line_items(self) -> List[LineItem]:
        return sanitize_line_items(self.line_items)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_ESTIMATE_STATUSES

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "5f0c8a4e-7f55-4a59-9d9f-3b8a8d3c2e11",
                "owner_id": "owner_123",
                "client_name": "Jane Homeowner",
                "client_email": "jane@example.com",
                "project_name": "Kitchen repaint",
                "line_items": [
                    {"id": "item_0", "description": "Paint", "quantity": "2",
                     "rate": "50.00", "total": "100.00"}
                ],
                "tax_rate": "8.000",
                "deposit": "0.00",
                "total": "108.00",
                "status": "draft",
                "view_token": "q5m1...",
            }
        }
