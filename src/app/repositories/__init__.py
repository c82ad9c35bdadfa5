from .estimate_repository import EstimateRepository
from .invoice_repository import InvoiceRepository
from .invoice_payment_repository import InvoicePaymentRepository
from .job_repository import JobRepository
from .client_repository import ClientRepository
from .pending_payment_repository import PendingPaymentRepository

__all__ = [
    "EstimateRepository",
    "InvoiceRepository",
    "InvoicePaymentRepository",
    "JobRepository",
    "ClientRepository",
    "PendingPaymentRepository",
]
