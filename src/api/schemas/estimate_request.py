"""Request schemas for Estimate API

Pydantic models for validating incoming HTTP requests. The owner comes from
the X-Owner-Id header, never from the body.
"""

from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class CreateEstimateRequest(BaseModel):
    """
    Request schema for creating an estimate

    Used for POST /estimates endpoint.
    """

    client_name: str = Field(..., min_length=1, max_length=200)
    client_email: str = Field(default="", max_length=320)
    client_phone: str = Field(default="", max_length=50)
    project_name: str = Field(..., min_length=1, max_length=300)
    line_items: Any = Field(
        default=None,
        description="List of {description, quantity|qty, rate|unit_price} rows"
    )
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=3)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator('client_name', 'project_name')
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
                "project_name": "Kitchen repaint",
                "line_items": [
                    {"description": "Paint", "quantity": 2, "rate": 50},
                    {"description": "Labor", "quantity": 8, "rate": 65},
                ],
                "tax_rate": "8",
                "deposit": "100",
            }
        }


class RejectEstimateRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=2000)
