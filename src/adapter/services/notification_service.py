"""Notification Service Implementations

Provides concrete implementations for delivering client-facing messages.
"""

import asyncio
import logging
from typing import Any, Dict, Optional
import httpx
from src.app.services.notification_service import NotificationService, NotificationTemplate

logger = logging.getLogger(__name__)


class LoggingNotificationService(NotificationService):
    """
    Notification service that logs messages

    Useful for development and testing, or as a fallback.
    """

    async def send(
        self,
        recipient_email: str,
        template_type: NotificationTemplate,
        template_data: Dict[str, Any],
    ) -> bool:
        """
        Log the message

        Returns:
            Always True (logging never fails)
        """
        logger.info(
            f"[NOTIFICATION] To: {recipient_email}, "
            f"Template: {template_type.value}, "
            f"Data keys: {sorted(template_data.keys())}"
        )
        return True


class WebhookNotificationService(NotificationService):
    """
    Notification service that hands messages to the email function via HTTP

    Sends a JSON payload to the configured webhook URL and retries transport
    failures and 5xx answers with a linear backoff.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff_seconds: float = 2.0,
    ):
        """
        Initialize webhook notification service

        Args:
            webhook_url: URL to POST messages to
            timeout: Request timeout in seconds
            max_retries: Extra attempts after the first failure
            backoff_seconds: Base wait, multiplied by the attempt number
        """
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds

    async def send(
        self,
        recipient_email: str,
        template_type: NotificationTemplate,
        template_data: Dict[str, Any],
    ) -> bool:
        """
        Deliver the message via webhook

        Returns:
            True if the webhook accepted the message, False otherwise
        """
        payload = {
            "to": recipient_email,
            "templateType": template_type.value,
            "templateData": template_data,
        }

        for attempt in range(1, self.max_retries + 2):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        self.webhook_url,
                        json=payload,
                        headers={"Content-Type": "application/json"},
                    )
                if response.status_code < 500:
                    response.raise_for_status()
                    logger.info(
                        f"Notification {template_type.value} sent to {recipient_email}"
                    )
                    return True
                error = f"HTTP {response.status_code}"
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"Notification {template_type.value} rejected by webhook: {e}"
                )
                return False
            except httpx.HTTPError as e:
                error = str(e) or type(e).__name__

            if attempt <= self.max_retries:
                wait = attempt * self.backoff_seconds
                logger.warning(
                    f"Notification retry {attempt}/{self.max_retries} after {error}, "
                    f"waiting {wait}s"
                )
                await asyncio.sleep(wait)
            else:
                logger.error(
                    f"Failed to send notification {template_type.value} "
                    f"to {recipient_email}: {error}"
                )

        return False


class CompositeNotificationService(NotificationService):
    """
    Notification service that delegates to multiple services

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, services: list[NotificationService]):
        self.services = services

    async def send(
        self,
        recipient_email: str,
        template_type: NotificationTemplate,
        template_data: Dict[str, Any],
    ) -> bool:
        """
        Send to every configured service

        Returns:
            True only if every delivering service accepted the message
        """
        success = True
        for service in self.services:
            try:
                if not await service.send(recipient_email, template_type, template_data):
                    success = False
            except Exception as e:
                logger.error(f"Notification service {type(service).__name__} failed: {e}")
                success = False
        return success


def create_notification_service(
    webhook_url: Optional[str] = None,
    timeout: float = 10.0,
    max_retries: int = 2,
) -> NotificationService:
    """
    Factory function to create appropriate notification service

    Args:
        webhook_url: Optional webhook URL. If provided, creates composite
                     service with logging + webhook. Otherwise, just logging.

    Returns:
        Configured NotificationService
    """
    services: list[NotificationService] = [LoggingNotificationService()]

    if webhook_url:
        services.append(
            WebhookNotificationService(webhook_url, timeout=timeout, max_retries=max_retries)
        )

    if len(services) == 1:
        return services[0]

    return CompositeNotificationService(services)
