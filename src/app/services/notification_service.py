"""Notification Service Interface

Defines the contract for delivering client-facing messages (email, push).
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict


class NotificationTemplate(str, Enum):
    """Message templates known to the delivery collaborator"""
    ESTIMATE_SENT = "estimate_sent"
    ESTIMATE_SIGNED = "estimate_signed"
    INVOICE_SENT = "invoice_sent"
    PAYMENT_RECEIVED = "payment_received"


class NotificationService(ABC):
    """
    Abstract notification service

    Implementations can deliver via:
    - Logging (development)
    - Webhook to the email function (HTTP POST)
    - Several channels at once (composite)

    Delivery guarantees are the collaborator's concern; callers only get a
    success/failure signal.
    """

    @abstractmethod
    async def send(
        self,
        recipient_email: str,
        template_type: NotificationTemplate,
        template_data: Dict[str, Any],
    ) -> bool:
        """
        Send a templated message

        Args:
            recipient_email: Destination address
            template_type: Template to render
            template_data: Values for the template placeholders

        Returns:
            True if the message was accepted for delivery, False otherwise
        """
        pass
