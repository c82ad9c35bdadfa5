from .base import BaseModel, generate_uuid, generate_view_token, utc_now
from .line_item import (
    LineItem,
    LineItemIntegrityError,
    sanitize_line_items,
    line_items_to_storage,
    subtotal,
    document_total,
)
from .estimate import Estimate, EstimateStatus
from .invoice import Invoice, InvoiceStatus, derive_invoice_status
from .invoice_payment import InvoicePayment
from .job import Job, JobStatus
from .client import Client
from .pending_payment import PendingPayment, PendingPaymentState
from .events import EstimateCreated, EstimateStatusChanged

__all__ = [
    "BaseModel",
    "generate_uuid",
    "generate_view_token",
    "LineItem",
    "LineItemIntegrityError",
    "sanitize_line_items",
    "line_items_to_storage",
    "subtotal",
    "document_total",
    "Estimate",
    "EstimateStatus",
    "Invoice",
    "InvoiceStatus",
    "derive_invoice_status",
    "InvoicePayment",
    "Job",
    "JobStatus",
    "Client",
    "PendingPayment",
    "PendingPaymentState",
    "EstimateCreated",
    "EstimateStatusChanged",
]
