from .unit_of_work import UnitOfWork
from .notification_service import NotificationService, NotificationTemplate
from .payment_processor import (
    PaymentProcessor,
    PaymentAuthorization,
    AuthorizationStatus,
    PaymentProcessorError,
    PaymentProcessorTimeout,
)
from .event_publisher import EventPublisher

__all__ = [
    "UnitOfWork",
    "NotificationService",
    "NotificationTemplate",
    "PaymentProcessor",
    "PaymentAuthorization",
    "AuthorizationStatus",
    "PaymentProcessorError",
    "PaymentProcessorTimeout",
    "EventPublisher",
]
