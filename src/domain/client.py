"""Client Domain Entity

Owner-maintained contact record with simple aggregate counters.
"""

from datetime import datetime
from decimal import Decimal
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String, Text, Integer, DateTime
from src.domain.base import BaseModel, generate_uuid, utc_now


class Client(BaseModel, table=True):
    """
    Client - Customer of an owner

    Domain Rules:
    - Mutated only through direct CRUD
    - total_jobs / total_value are owner-maintained, not derived
    """

    __tablename__ = "clients"
    __table_args__ = (
        Index('ix_clients_owner_id', 'owner_id'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
    )

    owner_id: str = Field(
        description="Owning account"
    )

    name: str = Field(
        sa_column=Column(String(200), nullable=False),
    )

    email: str = Field(
        default="",
        sa_column=Column(String(320), nullable=False, default=""),
    )

    phone: str = Field(
        default="",
        sa_column=Column(String(50), nullable=False, default=""),
    )

    address: str = Field(
        default="",
        sa_column=Column(Text, nullable=False, default=""),
    )

    total_jobs: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )

    total_value: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
    )
