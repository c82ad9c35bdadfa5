"""Shared base for domain entities"""

import secrets
import uuid
from datetime import datetime, timezone
from sqlmodel import SQLModel

VIEW_TOKEN_BYTES = 32


class BaseModel(SQLModel):
    """Base class for all persisted entities"""
    pass


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Timezone-aware current time; every stored timestamp is UTC"""
    return datetime.now(timezone.utc)


def generate_view_token() -> str:
    """
    Issue a public view token

    Tokens are bearer capabilities for financial documents, so they always
    come from the OS CSPRNG. URL-safe base64, 43 characters for 32 bytes.
    """
    return secrets.token_urlsafe(VIEW_TOKEN_BYTES)
