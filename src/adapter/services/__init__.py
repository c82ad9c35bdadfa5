from .unit_of_work import SqlAlchemyUnitOfWork
from .notification_service import (
    LoggingNotificationService,
    WebhookNotificationService,
    CompositeNotificationService,
    create_notification_service,
)
from .payment_processor import StripePaymentProcessor
from .event_publisher import InProcessEventPublisher

__all__ = [
    "SqlAlchemyUnitOfWork",
    "LoggingNotificationService",
    "WebhookNotificationService",
    "CompositeNotificationService",
    "create_notification_service",
    "StripePaymentProcessor",
    "InProcessEventPublisher",
]
