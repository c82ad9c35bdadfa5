"""Request schemas for Job API

Jobs are usually created by the estimate projection; this covers the
manual entries an owner adds directly.
"""

from datetime import date as date_type
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from src.domain.job import JobStatus


class CreateJobRequest(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=200)
    project_type: str = Field(..., min_length=1, max_length=300)
    status: JobStatus = JobStatus.DRAFT
    total: Decimal = Field(default=Decimal("0"), ge=0)
    date: Optional[date_type] = None
