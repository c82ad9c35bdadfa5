"""API error transport

Use case errors travel as ClientError and leave the service as
{"error": {"code": ..., "message": ...}}.
"""

import logging
from typing import NoReturn
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.result import Error

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "EMPTY_DOCUMENT": status.HTTP_400_BAD_REQUEST,
    "REQUEST_FAILED": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "PAYMENT_DECLINED": status.HTTP_402_PAYMENT_REQUIRED,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "PAYMENT_PENDING": status.HTTP_202_ACCEPTED,
    "UPSTREAM_ERROR": status.HTTP_502_BAD_GATEWAY,
    "INTEGRITY_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "PAYMENT_RECONCILIATION_REQUIRED": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "PAYMENT_REFUND_REQUIRED": status.HTTP_409_CONFLICT,
}


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code


def raise_for_error(error: Error) -> NoReturn:
    status_code = ERROR_STATUS_CODES.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"Request failed: {error.code} {error.message} reason={error.reason}")
    raise ClientError(error, status_code=status_code)


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.error.code, "message": exc.error.message}},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "; ".join(details) or "Invalid request parameters",
            }
        },
    )
