"""Error shaping for unauthenticated callers

Token holders learn whether their input was wrong, whether the document
exists and how a payment ended. Every other failure is logged with full
context and reported as a generic REQUEST_FAILED.
"""

import logging
import re
from libs.result import Error

logger = logging.getLogger(__name__)

VIEW_TOKEN_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,128}$")

DETAILED_PUBLIC_CODES = frozenset({
    "VALIDATION_ERROR",
    "NOT_FOUND",
    "PAYMENT_DECLINED",
    "PAYMENT_PENDING",
    "PAYMENT_RECONCILIATION_REQUIRED",
    "PAYMENT_REFUND_REQUIRED",
})

DOCUMENT_NOT_FOUND = Error(code="NOT_FOUND", message="Document not found")

REQUEST_FAILED = Error(
    code="REQUEST_FAILED",
    message="The request could not be completed",
)


def is_well_formed_token(token: str) -> bool:
    return bool(token) and VIEW_TOKEN_PATTERN.match(token) is not None


def to_public_error(error: Error, context: str) -> Error:
    if error.code in DETAILED_PUBLIC_CODES:
        if error.code == "NOT_FOUND":
            return DOCUMENT_NOT_FOUND
        return Error(code=error.code, message=error.message)

    logger.error(
        f"Public request failed ({context}): code={error.code}, "
        f"message={error.message}, reason={error.reason}"
    )
    return REQUEST_FAILED
