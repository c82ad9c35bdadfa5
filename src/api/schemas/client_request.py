"""Request schemas for Client API"""

from pydantic import BaseModel, Field


class CreateClientRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(default="", max_length=320)
    phone: str = Field(default="", max_length=50)
    address: str = Field(default="", max_length=1000)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Jane Homeowner",
                "email": "jane@example.com",
                "phone": "555-0100",
                "address": "12 Elm Street",
            }
        }
