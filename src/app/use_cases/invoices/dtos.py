"""Data Transfer Objects for Invoice Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Any, List, Optional
from pydantic import BaseModel, Field
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_payment import InvoicePayment
from src.domain.line_item import LineItem, sanitize_line_items, subtotal


class CreateInvoiceInput(BaseModel):
    """
    Command DTO for a standalone invoice

    client_email is required for standalone invoices; the use case reports a
    VALIDATION_ERROR when it is blank.
    """

    owner_id: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1, max_length=200)
    client_email: str = Field(default="", max_length=320)
    client_phone: str = Field(default="", max_length=50)
    project_name: str = Field(..., min_length=1, max_length=300)
    line_items: Any = Field(default=None, description="Raw line items")
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0, le=100, decimal_places=3)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=5000)

    class Config:
        json_schema_extra = {
            "example": {
                "owner_id": "owner_123",
                "client_name": "Jane Homeowner",
                "client_email": "jane@example.com",
                "project_name": "Deck repair",
                "line_items": [{"description": "Labor", "quantity": 10, "rate": 50}],
                "tax_rate": "0",
                "due_date": "2024-02-29",
            }
        }


class ConvertEstimateInput(BaseModel):
    """Conversion options; everything else is copied from the estimate"""

    owner_id: str = Field(..., min_length=1)
    client_email: Optional[str] = Field(default=None, max_length=320)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=5000)


class UpdateInvoiceInput(BaseModel):
    """Partial update; fields left as None are not touched"""

    client_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    client_email: Optional[str] = Field(default=None, max_length=320)
    client_phone: Optional[str] = Field(default=None, max_length=50)
    project_name: Optional[str] = Field(default=None, min_length=1, max_length=300)
    line_items: Any = Field(default=None)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100, decimal_places=3)
    due_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=5000)


class RecordPaymentCommand(BaseModel):
    """
    Command DTO for recording a payment

    Used by the owner (manual entry), by PayInvoice after a successful
    charge, and by reconciliation.
    """

    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Payment amount in currency units (must be > 0, max 2 decimals)"
    )
    note: Optional[str] = Field(default=None, max_length=2000)
    idempotency_key: Optional[str] = Field(
        default=None,
        max_length=128,
        description="Recording the same key twice is a no-op"
    )
    processor_reference: Optional[str] = Field(default=None, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "200.00",
                "note": "Check #1042",
            }
        }


class InvoicePaymentDTO(BaseModel):
    id: str
    amount: Decimal
    note: Optional[str] = None
    processor_reference: Optional[str] = None
    paid_at: datetime


class InvoiceResponseDTO(BaseModel):
    """Owner view of an invoice with its payment history"""

    id: str
    owner_id: str
    estimate_id: Optional[str] = None
    invoice_number: str
    client_name: str
    client_email: str
    client_phone: str
    project_name: str
    line_items: List[LineItem]
    subtotal: Decimal
    tax_rate: Decimal
    total: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    status: InvoiceStatus
    is_overdue: bool
    issue_date: date
    due_date: Optional[date] = None
    notes: Optional[str] = None
    view_token: str
    sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    payments: List[InvoicePaymentDTO] = Field(default_factory=list)


class ListInvoicesResponseDTO(BaseModel):
    invoices: List[InvoiceResponseDTO]
    limit: int
    offset: int


class PublicInvoiceView(BaseModel):
    """What a token holder may see"""

    invoice_number: str
    client_name: str
    project_name: str
    line_items: List[LineItem]
    subtotal: Decimal
    tax_rate: Decimal
    total: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    status: InvoiceStatus
    is_overdue: bool
    issue_date: date
    due_date: Optional[date] = None


def to_payment_dto(payment: InvoicePayment) -> InvoicePaymentDTO:
    return InvoicePaymentDTO(
        id=payment.id,
        amount=Decimal(payment.amount),
        note=payment.note,
        processor_reference=payment.processor_reference,
        paid_at=payment.paid_at,
    )


def to_invoice_response(
    invoice: Invoice, payments: Optional[List[InvoicePayment]] = None
) -> InvoiceResponseDTO:
    items = sanitize_line_items(invoice.line_items)
    return InvoiceResponseDTO(
        id=invoice.id,
        owner_id=invoice.owner_id,
        estimate_id=invoice.estimate_id,
        invoice_number=invoice.invoice_number,
        client_name=invoice.client_name,
        client_email=invoice.client_email,
        client_phone=invoice.client_phone,
        project_name=invoice.project_name,
        line_items=items,
        subtotal=subtotal(items),
        tax_rate=Decimal(invoice.tax_rate),
        total=Decimal(invoice.total),
        amount_paid=Decimal(invoice.amount_paid),
        balance_due=invoice.balance_due,
        status=invoice.status,
        is_overdue=invoice.is_overdue(),
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        notes=invoice.notes,
        view_token=invoice.view_token,
        sent_at=invoice.sent_at,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
        payments=[to_payment_dto(p) for p in payments or []],
    )


def to_public_invoice_view(invoice: Invoice) -> PublicInvoiceView:
    items = sanitize_line_items(invoice.line_items)
    return PublicInvoiceView(
        invoice_number=invoice.invoice_number,
        client_name=invoice.client_name,
        project_name=invoice.project_name,
        line_items=items,
        subtotal=subtotal(items),
        tax_rate=Decimal(invoice.tax_rate),
        total=Decimal(invoice.total),
        amount_paid=Decimal(invoice.amount_paid),
        balance_due=invoice.balance_due,
        status=invoice.status,
        is_overdue=invoice.is_overdue(),
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
    )


class ReconciliationResultDTO(BaseModel):
    """Outcome of one pass over the pending payment queue"""

    total_checked: int
    recorded: int
    failed: int
    still_pending: int
    refund_required: int = 0
    reconciliation_time: datetime
    execution_time_ms: int
