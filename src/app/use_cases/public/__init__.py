"""Public access gateway use cases (token holders, no account)"""
from .fetch_estimate import FetchEstimateByToken
from .fetch_invoice import FetchInvoiceByToken
from .sign_estimate_by_token import SignEstimateByToken
from .reject_estimate_by_token import RejectEstimateByToken
from .pay_invoice import PayInvoice, payment_idempotency_key
from .dtos import PayInvoiceCommand, PayInvoiceResultDTO
from .errors import DOCUMENT_NOT_FOUND, REQUEST_FAILED, is_well_formed_token, to_public_error

__all__ = [
    "FetchEstimateByToken",
    "FetchInvoiceByToken",
    "SignEstimateByToken",
    "RejectEstimateByToken",
    "PayInvoice",
    "payment_idempotency_key",
    "PayInvoiceCommand",
    "PayInvoiceResultDTO",
    "DOCUMENT_NOT_FOUND",
    "REQUEST_FAILED",
    "is_well_formed_token",
    "to_public_error",
]
