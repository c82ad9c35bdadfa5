"""Stripe Payment Processor Implementation

Authorizes payments through the Stripe PaymentIntents API using the
official stripe SDK's async client.
"""

import logging
from decimal import Decimal
from typing import Any, Optional
import stripe
from src.app.services.payment_processor import (
    PaymentProcessor,
    PaymentAuthorization,
    AuthorizationStatus,
    PaymentProcessorError,
    PaymentProcessorTimeout,
)

logger = logging.getLogger(__name__)

DECLINED_INTENT_STATUSES = {"requires_payment_method", "canceled"}


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())


class StripePaymentProcessor(PaymentProcessor):
    """
    Stripe implementation of PaymentProcessor

    The idempotency key is sent both as the request idempotency key, so a
    retried create never makes a second intent, and as intent metadata, so
    reconciliation can find the intent later.

    Retries are owned by the caller, so the SDK's own network retries are off.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.stripe.com",
        currency: str = "usd",
        timeout: float = 15.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.currency = currency.lower()
        self.timeout = timeout
        self._client = stripe.StripeClient(
            api_key,
            base_addresses={"api": self.base_url},
            http_client=stripe.HTTPXClient(timeout=timeout),
            max_network_retries=0,
        )

    async def authorize(
        self, amount: Decimal, payment_method: str, idempotency_key: str
    ) -> PaymentAuthorization:
        params = {
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "payment_method": payment_method,
            "confirm": True,
            "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
            "metadata": {"idempotency_key": idempotency_key},
        }

        try:
            intent = await self._client.v1.payment_intents.create_async(
                params=params,
                options={"idempotency_key": idempotency_key},
            )
        except stripe.CardError as e:
            return PaymentAuthorization(
                status=AuthorizationStatus.DECLINED,
                reference=self._intent_id_from_error(e),
                message=e.user_message or "Card declined",
            )
        except stripe.APIConnectionError as e:
            # The request may have reached Stripe; only a status lookup can tell
            logger.warning(f"Payment processor connection failed for key {idempotency_key}: {e}")
            raise PaymentProcessorTimeout() from e
        except stripe.StripeError as e:
            raise self._to_processor_error(e) from e

        return self._to_authorization(intent)

    async def get_status(self, idempotency_key: str) -> PaymentAuthorization:
        params = {"query": f"metadata['idempotency_key']:'{idempotency_key}'", "limit": 1}

        try:
            found = await self._client.v1.payment_intents.search_async(params=params)
        except stripe.APIConnectionError as e:
            raise PaymentProcessorTimeout() from e
        except stripe.StripeError as e:
            raise self._to_processor_error(e) from e

        intents = list(getattr(found, "data", None) or [])
        if not intents:
            return PaymentAuthorization(status=AuthorizationStatus.UNKNOWN)

        return self._to_authorization(intents[0])

    @staticmethod
    def _to_processor_error(error: stripe.StripeError) -> PaymentProcessorError:
        status_code = error.http_status or 0
        transient = isinstance(error, stripe.RateLimitError) or status_code >= 500
        return PaymentProcessorError(
            f"Payment processor HTTP {status_code}: {error.user_message or type(error).__name__}",
            transient=transient,
        )

    @staticmethod
    def _intent_id_from_error(error: stripe.StripeError) -> Optional[str]:
        intent = getattr(error.error, "payment_intent", None) if error.error else None
        return getattr(intent, "id", None) if intent else None

    @staticmethod
    def _to_authorization(intent: Any) -> PaymentAuthorization:
        intent_status: Optional[str] = getattr(intent, "status", None)
        reference = getattr(intent, "id", None)

        if intent_status == "succeeded":
            return PaymentAuthorization(status=AuthorizationStatus.SUCCEEDED, reference=reference)

        if intent_status in DECLINED_INTENT_STATUSES:
            last_error = getattr(intent, "last_payment_error", None)
            return PaymentAuthorization(
                status=AuthorizationStatus.DECLINED,
                reference=reference,
                message=getattr(last_error, "message", None) or "Payment was not completed",
            )

        return PaymentAuthorization(
            status=AuthorizationStatus.UNKNOWN,
            reference=reference,
            message=f"Payment intent status: {intent_status}",
        )
