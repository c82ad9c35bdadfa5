"""Data Transfer Objects for Job Use Cases"""

from datetime import datetime, date as date_type
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.job import Job, JobStatus


class CreateJobInput(BaseModel):
    owner_id: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1, max_length=200)
    project_type: str = Field(..., min_length=1, max_length=300)
    status: JobStatus = JobStatus.DRAFT
    total: Decimal = Field(default=Decimal("0"), ge=0)
    date: Optional[date_type] = None


class UpdateJobInput(BaseModel):
    client_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    project_type: Optional[str] = Field(default=None, min_length=1, max_length=300)
    status: Optional[JobStatus] = None
    total: Optional[Decimal] = Field(default=None, ge=0)
    date: Optional[date_type] = None


class JobResponseDTO(BaseModel):
    id: str
    owner_id: str
    estimate_id: Optional[str] = None
    client_name: str
    project_type: str
    status: JobStatus
    total: Decimal
    date: date_type
    created_at: datetime


class ListJobsResponseDTO(BaseModel):
    jobs: List[JobResponseDTO]


def to_job_response(job: Job) -> JobResponseDTO:
    return JobResponseDTO(
        id=job.id,
        owner_id=job.owner_id,
        estimate_id=job.estimate_id,
        client_name=job.client_name,
        project_type=job.project_type,
        status=job.status,
        total=Decimal(job.total),
        date=job.date,
        created_at=job.created_at,
    )
