"""Data Transfer Objects for Estimate Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from pydantic import BaseModel, Field
from src.domain.estimate import Estimate, EstimateStatus
from src.domain.line_item import LineItem, sanitize_line_items, subtotal


class CreateEstimateInput(BaseModel):
    """
    Command DTO for creating an estimate

    line_items is accepted raw; the sanitizer decides what survives.
    """

    owner_id: str = Field(..., min_length=1, description="Owning account")
    client_name: str = Field(..., min_length=1, max_length=200)
    client_email: str = Field(default="", max_length=320)
    client_phone: str = Field(default="", max_length=50)
    project_name: str = Field(..., min_length=1, max_length=300)
    line_items: Any = Field(default=None, description="Raw line items")
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=3, description="Tax percent")
    deposit: Decimal = Field(default=Decimal("0"), ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "owner_id": "owner_123",
                "client_name": "Jane Homeowner",
                "client_email": "jane@example.com",
                "project_name": "Kitchen repaint",
                "line_items": [{"description": "Paint", "quantity": 2, "rate": 50}],
                "tax_rate": "8",
            }
        }


class UpdateEstimateInput(BaseModel):
    """Partial update; fields left as None are not touched"""

    client_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    client_email: Optional[str] = Field(default=None, max_length=320)
    client_phone: Optional[str] = Field(default=None, max_length=50)
    project_name: Optional[str] = Field(default=None, min_length=1, max_length=300)
    line_items: Any = Field(default=None)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100, decimal_places=3)
    deposit: Optional[Decimal] = Field(default=None, ge=0)


class SignEstimateCommand(BaseModel):
    """Public e-signature submitted by the client"""

    signer_name: str = Field(default="", max_length=200)
    signer_email: str = Field(default="", max_length=320)
    signature: str = Field(default="", description="Signature image data URL or stored reference")

    class Config:
        json_schema_extra = {
            "example": {
                "signer_name": "Jane Homeowner",
                "signer_email": "jane@example.com",
                "signature": "data:image/png;base64,iVBORw0KGgo...",
            }
        }


class RejectEstimateCommand(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=2000)


class EstimateResponseDTO(BaseModel):
    """Owner view of an estimate"""

    id: str
    owner_id: str
    client_name: str
    client_email: str
    client_phone: str
    project_name: str
    line_items: List[LineItem]
    subtotal: Decimal
    tax_rate: Decimal
    deposit: Decimal
    total: Decimal
    status: EstimateStatus
    view_token: str
    sent_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    signed_at: Optional[datetime] = None
    signed_by_name: Optional[str] = None
    signed_by_email: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ListEstimatesResponseDTO(BaseModel):
    estimates: List[EstimateResponseDTO]
    limit: int
    offset: int


def to_estimate_response(estimate: Estimate) -> EstimateResponseDTO:
    items = sanitize_line_items(estimate.line_items)
    return EstimateResponseDTO(
        id=estimate.id,
        owner_id=estimate.owner_id,
        client_name=estimate.client_name,
        client_email=estimate.client_email,
        client_phone=estimate.client_phone,
        project_name=estimate.project_name,
        line_items=items,
        subtotal=subtotal(items),
        tax_rate=Decimal(estimate.tax_rate),
        deposit=Decimal(estimate.deposit),
        total=Decimal(estimate.total),
        status=estimate.status,
        view_token=estimate.view_token,
        sent_at=estimate.sent_at,
        read_at=estimate.read_at,
        signed_at=estimate.signed_at,
        signed_by_name=estimate.signed_by_name,
        signed_by_email=estimate.signed_by_email,
        rejected_at=estimate.rejected_at,
        rejection_reason=estimate.rejection_reason,
        created_at=estimate.created_at,
        updated_at=estimate.updated_at,
    )


class PublicEstimateView(BaseModel):
    """What a token holder may see; no owner or contact data"""

    client_name: str
    project_name: str
    line_items: List[LineItem]
    subtotal: Decimal
    tax_rate: Decimal
    deposit: Decimal
    total: Decimal
    status: EstimateStatus
    sent_at: Optional[datetime] = None
    signed_at: Optional[datetime] = None
    signed_by_name: Optional[str] = None
    rejected_at: Optional[datetime] = None
    created_at: datetime


def to_public_estimate_view(estimate: Estimate) -> PublicEstimateView:
    items = sanitize_line_items(estimate.line_items)
    return PublicEstimateView(
        client_name=estimate.client_name,
        project_name=estimate.project_name,
        line_items=items,
        subtotal=subtotal(items),
        tax_rate=Decimal(estimate.tax_rate),
        deposit=Decimal(estimate.deposit),
        total=Decimal(estimate.total),
        status=estimate.status,
        sent_at=estimate.sent_at,
        signed_at=estimate.signed_at,
        signed_by_name=estimate.signed_by_name,
        rejected_at=estimate.rejected_at,
        created_at=estimate.created_at,
    )
