"""Request schemas for Invoice API"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class CreateInvoiceRequest(BaseModel):
    """
    Request schema for a standalone invoice

    Used for POST /invoices endpoint.
    """

    client_name: str = Field(..., min_length=1, max_length=200)
    client_email: str = Field(..., min_length=1, max_length=320)
    client_phone: str = Field(default="", max_length=50)
    project_name: str = Field(..., min_length=1, max_length=300)
    line_items: Any = Field(default=None)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=3)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=5000)

    @field_validator('client_name', 'project_name', 'client_email')
    @classmethod
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "client_name": "Jane Homeowner",
                "client_email": "jane@example.com",
                "project_name": "Deck repair",
                "line_items": [{"description": "Labor", "quantity": 10, "rate": 50}],
                "due_date": "2024-02-29",
            }
        }


class ConvertEstimateRequest(BaseModel):
    """Used for POST /estimates/{estimate_id}/convert"""

    client_email: Optional[str] = Field(default=None, max_length=320)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=5000)


class RecordPaymentRequest(BaseModel):
    """
    Request schema for a manually recorded payment

    Used for POST /invoices/{invoice_id}/payments endpoint.
    """

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Payment amount (must be > 0, at most 2 decimals)"
    )
    note: Optional[str] = Field(default=None, max_length=2000)
    idempotency_key: Optional[str] = Field(default=None, min_length=1, max_length=128)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        """Ensure amount is positive and expressed in cents"""
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        if v.as_tuple().exponent < -2 and v != v.quantize(Decimal("0.01")):
            raise ValueError("Amount must have at most 2 decimal places")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "200.00",
                "note": "Check #1042",
                "idempotency_key": "check-1042",
            }
        }
