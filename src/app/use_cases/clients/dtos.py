"""Data Transfer Objects for Client Use Cases"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.client import Client


class CreateClientInput(BaseModel):
    owner_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(default="", max_length=320)
    phone: str = Field(default="", max_length=50)
    address: str = Field(default="", max_length=1000)


class UpdateClientInput(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=1000)
    total_jobs: Optional[int] = Field(default=None, ge=0)
    total_value: Optional[Decimal] = Field(default=None, ge=0)


class ClientResponseDTO(BaseModel):
    id: str
    owner_id: str
    name: str
    email: str
    phone: str
    address: str
    total_jobs: int
    total_value: Decimal
    created_at: datetime
    updated_at: datetime


class ListClientsResponseDTO(BaseModel):
    clients: List[ClientResponseDTO]


def to_client_response(client: Client) -> ClientResponseDTO:
    return ClientResponseDTO(
        id=client.id,
        owner_id=client.owner_id,
        name=client.name,
        email=client.email,
        phone=client.phone,
        address=client.address,
        total_jobs=client.total_jobs,
        total_value=Decimal(client.total_value),
        created_at=client.created_at,
        updated_at=client.updated_at,
    )
