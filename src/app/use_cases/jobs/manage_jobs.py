"""Job CRUD Use Cases

Owner-maintained jobs. Jobs projected from estimates can be edited like
any other job.
"""

from decimal import Decimal
from datetime import date
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.job_repository import JobRepository
from src.domain.job import Job
from src.domain.line_item import quantize_money
from .dtos import (
    CreateJobInput,
    UpdateJobInput,
    JobResponseDTO,
    ListJobsResponseDTO,
    to_job_response,
)


class CreateJob:
    def __init__(self, uow: UnitOfWork, job_repo: JobRepository):
        self.uow = uow
        self.job_repo = job_repo

    async def execute(self, command: CreateJobInput) -> Result[JobResponseDTO]:
        try:
            job = await self.job_repo.create(
                Job(
                    owner_id=command.owner_id,
                    client_name=command.client_name.strip(),
                    project_type=command.project_type.strip(),
                    status=command.status,
                    total=quantize_money(command.total),
                    date=command.date or date.today(),
                )
            )
            await self.uow.commit()
            return Return.ok(to_job_response(job))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="CREATE_JOB_FAILED", message="Failed to create job", reason=str(e))
            )


class ListJobs:
    def __init__(self, job_repo: JobRepository):
        self.job_repo = job_repo

    async def execute(self, owner_id: str) -> Result[ListJobsResponseDTO]:
        try:
            jobs = await self.job_repo.get_by_owner(owner_id)
            return Return.ok(ListJobsResponseDTO(jobs=[to_job_response(j) for j in jobs]))
        except Exception as e:
            return Return.err(
                Error(code="LIST_JOBS_FAILED", message="Failed to list jobs", reason=str(e))
            )


class UpdateJob:
    def __init__(self, uow: UnitOfWork, job_repo: JobRepository):
        self.uow = uow
        self.job_repo = job_repo

    async def execute(
        self, owner_id: str, job_id: str, command: UpdateJobInput
    ) -> Result[JobResponseDTO]:
        try:
            job = await self.job_repo.get_by_id(job_id)
            if not job or job.owner_id != owner_id:
                return Return.err(Error(code="NOT_FOUND", message=f"Job {job_id} not found"))

            if command.client_name is not None:
                job.client_name = command.client_name.strip()
            if command.project_type is not None:
                job.project_type = command.project_type.strip()
            if command.status is not None:
                job.status = command.status
            if command.total is not None:
                job.total = quantize_money(Decimal(command.total))
            if command.date is not None:
                job.date = command.date

            updated = await self.job_repo.update(job)
            await self.uow.commit()
            return Return.ok(to_job_response(updated))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="UPDATE_JOB_FAILED", message="Failed to update job", reason=str(e))
            )


class DeleteJob:
    def __init__(self, uow: UnitOfWork, job_repo: JobRepository):
        self.uow = uow
        self.job_repo = job_repo

    async def execute(self, owner_id: str, job_id: str) -> Result[None]:
        try:
            job = await self.job_repo.get_by_id(job_id)
            if not job or job.owner_id != owner_id:
                return Return.err(Error(code="NOT_FOUND", message=f"Job {job_id} not found"))

            await self.job_repo.delete(job)
            await self.uow.commit()
            return Return.ok(None)
        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(code="DELETE_JOB_FAILED", message="Failed to delete job", reason=str(e))
            )
