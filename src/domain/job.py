"""Job Domain Entity

Dashboard projection of an estimate. Not authoritative: estimate logic
never reads jobs back.
"""

from datetime import datetime, date as date_type
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Date, DateTime
from src.domain.base import BaseModel, generate_uuid, utc_now


class JobStatus(str, Enum):
    """Job status types"""
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Job(BaseModel, table=True):
    """
    Job - Lightweight work record shown on the owner dashboard

    Domain Rules:
    - Auto-created when an estimate is created (EstimateCreated event)
    - Status mirrors the estimate coarsely: approved / sent / else draft
    - Owners may also move it to in_progress / completed by hand
    """

    __tablename__ = "jobs"
    __table_args__ = (
        Index('ix_jobs_owner_id', 'owner_id'),
        Index('ix_jobs_estimate_id', 'estimate_id'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
    )

    owner_id: str = Field(
        description="Owning account"
    )

    estimate_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), nullable=True),
        description="Estimate this job was projected from"
    )

    client_name: str = Field(
        sa_column=Column(String(200), nullable=False),
    )

    project_type: str = Field(
        sa_column=Column(String(300), nullable=False),
    )

    status: JobStatus = Field(
        default=JobStatus.DRAFT,
    )

    total: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
    )

    date: date_type = Field(
        default_factory=date_type.today,
        sa_column=Column(Date, nullable=False),
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
    )
