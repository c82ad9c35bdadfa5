"""Payment Processor Interface

Defines the contract for authorizing client payments with an external
processor. The processor moves money; this service only records the outcome.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class AuthorizationStatus(str, Enum):
    """Processor-side outcome of a charge"""
    SUCCEEDED = "succeeded"
    DECLINED = "declined"
    UNKNOWN = "unknown"      # Processor has no final answer (yet)


@dataclass(frozen=True)
class PaymentAuthorization:
    status: AuthorizationStatus
    reference: Optional[str] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == AuthorizationStatus.SUCCEEDED


class PaymentProcessorError(Exception):
    """Processor call failed before an outcome was known"""

    def __init__(self, message: str, transient: bool = False):
        super().__init__(message)
        self.transient = transient


class PaymentProcessorTimeout(PaymentProcessorError):
    """Processor did not answer in time; the charge may or may not exist"""

    def __init__(self, message: str = "Payment processor timed out"):
        super().__init__(message, transient=False)


class PaymentProcessor(ABC):
    """
    Abstract payment processor

    Every call carries an idempotency key so that retries never create a
    second charge.
    """

    @abstractmethod
    async def authorize(
        self, amount: Decimal, payment_method: str, idempotency_key: str
    ) -> PaymentAuthorization:
        """
        Charge a payment method

        Args:
            amount: Amount in major currency units
            payment_method: Processor payment method reference
            idempotency_key: Key identifying this logical charge

        Returns:
            PaymentAuthorization with SUCCEEDED or DECLINED

        Raises:
            PaymentProcessorTimeout: if no answer arrived within the timeout
            PaymentProcessorError: on transport or processor failures
        """
        pass

    @abstractmethod
    async def get_status(self, idempotency_key: str) -> PaymentAuthorization:
        """
        Look up the outcome of an earlier charge

        Used by reconciliation after an ambiguous timeout.

        Args:
            idempotency_key: Key passed to the original authorize call

        Returns:
            PaymentAuthorization (UNKNOWN if the processor has no record yet)
        """
        pass
