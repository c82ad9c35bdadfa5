"""Background workers for the documents service"""
from .payment_reconciler import PaymentReconcilerWorker

__all__ = ["PaymentReconcilerWorker"]
