from .estimate_repository import SqlAlchemyEstimateRepository
from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_payment_repository import SqlAlchemyInvoicePaymentRepository
from .job_repository import SqlAlchemyJobRepository
from .client_repository import SqlAlchemyClientRepository
from .pending_payment_repository import SqlAlchemyPendingPaymentRepository

__all__ = [
    "SqlAlchemyEstimateRepository",
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoicePaymentRepository",
    "SqlAlchemyJobRepository",
    "SqlAlchemyClientRepository",
    "SqlAlchemyPendingPaymentRepository",
]
