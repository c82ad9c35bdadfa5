"""Data Transfer Objects for the public (token) endpoints"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from src.app.use_cases.invoices.dtos import PublicInvoiceView


class PayInvoiceCommand(BaseModel):
    """
    Client payment submitted from the public invoice page

    client_nonce identifies one payment attempt in the browser; resubmitting
    the same attempt yields the same idempotency key.
    """

    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_method: str = Field(..., min_length=1, max_length=255)
    client_nonce: str = Field(..., min_length=1, max_length=128)
    payer_email: Optional[str] = Field(default=None, max_length=320)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "200.00",
                "payment_method": "pm_card_visa",
                "client_nonce": "b1c1f0a2-6c8e-4b1f-9a55-0b5d2f1e7c31",
            }
        }


class PayInvoiceResultDTO(BaseModel):
    """
    outcome:
    - paid: payment recorded on the invoice
    - queued: processor charged the card; recording finishes in reconciliation
    """

    outcome: str
    payment_reference: Optional[str] = None
    invoice: Optional[PublicInvoiceView] = None
