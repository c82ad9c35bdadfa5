"""Invoice lifecycle use cases"""
from .create_invoice import CreateInvoice
from .convert_estimate import ConvertEstimateToInvoice
from .update_invoice import UpdateInvoice
from .record_payment import RecordPayment
from .mark_invoice_sent import MarkInvoiceSent
from .delete_invoice import DeleteInvoice
from .get_invoice import GetInvoice
from .list_invoices import ListInvoices
from .reconcile_payments import ReconcilePendingPayments
from .dtos import (
    CreateInvoiceInput,
    ConvertEstimateInput,
    UpdateInvoiceInput,
    RecordPaymentCommand,
    InvoicePaymentDTO,
    InvoiceResponseDTO,
    ListInvoicesResponseDTO,
    PublicInvoiceView,
    ReconciliationResultDTO,
)

__all__ = [
    "CreateInvoice",
    "ConvertEstimateToInvoice",
    "UpdateInvoice",
    "RecordPayment",
    "MarkInvoiceSent",
    "DeleteInvoice",
    "GetInvoice",
    "ListInvoices",
    "ReconcilePendingPayments",
    "CreateInvoiceInput",
    "ConvertEstimateInput",
    "UpdateInvoiceInput",
    "RecordPaymentCommand",
    "InvoicePaymentDTO",
    "InvoiceResponseDTO",
    "ListInvoicesResponseDTO",
    "PublicInvoiceView",
    "ReconciliationResultDTO",
]
