"""Owner identity

Authentication happens upstream; the gateway forwards the account id in
the X-Owner-Id header.
"""

from typing import Optional
from fastapi import Header, status
from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError


async def get_owner_id(x_owner_id: Optional[str] = Header(default=None)) -> str:
    if x_owner_id and x_owner_id.strip():
        return x_owner_id.strip()

    if ApplicationConfig.AUTH_DISABLED:
        return ApplicationConfig.DEV_OWNER_ID

    raise ClientError(
        Error(code="UNAUTHORIZED", message="Missing X-Owner-Id header"),
        status_code=status.HTTP_401_UNAUTHORIZED,
    )
