"""ProjectEstimateToJob Use Case

Keeps the dashboard job list in step with estimates. Runs as an event
handler after the estimate transaction committed, in its own session;
a failure here never affects the estimate.
"""

import logging
from decimal import Decimal
from typing import Union
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.job_repository import JobRepository
from src.domain.estimate import EstimateStatus
from src.domain.events import EstimateCreated, EstimateStatusChanged
from src.domain.job import Job, JobStatus

logger = logging.getLogger(__name__)

MANUAL_JOB_STATUSES = frozenset({JobStatus.IN_PROGRESS, JobStatus.COMPLETED})


def job_status_for(estimate_status: str) -> JobStatus:
    """approved -> approved, sent -> sent, anything else -> draft"""
    if estimate_status == EstimateStatus.APPROVED.value:
        return JobStatus.APPROVED
    if estimate_status == EstimateStatus.SENT.value:
        return JobStatus.SENT
    return JobStatus.DRAFT


class ProjectEstimateToJob:
    """
    Use Case: Create or refresh the job for an estimate

    Business Rules:
    1. One job per estimate, created by whichever event arrives first
    2. Status and total follow the estimate
    3. A created event that arrives after a status event changes nothing
    4. Jobs the owner moved to in_progress/completed keep that status
    """

    def __init__(self, uow: UnitOfWork, job_repo: JobRepository):
        self.uow = uow
        self.job_repo = job_repo

    async def execute(
        self, event: Union[EstimateCreated, EstimateStatusChanged]
    ) -> Result[Job]:
        try:
            job = await self.job_repo.get_by_estimate_id(event.estimate_id)

            if job is None:
                # A status event may be the first one seen for an estimate
                job = await self.job_repo.create(
                    Job(
                        owner_id=event.owner_id,
                        estimate_id=event.estimate_id,
                        client_name=event.client_name,
                        project_type=event.project_name,
                        status=job_status_for(event.status),
                        total=Decimal(event.total),
                    )
                )
            elif isinstance(event, EstimateCreated):
                # A status event delivered first already carries newer state
                await self.uow.rollback()
                return Return.ok(job)
            else:
                if job.status not in MANUAL_JOB_STATUSES:
                    job.status = job_status_for(event.status)
                job.total = Decimal(event.total)
                job = await self.job_repo.update(job)

            await self.uow.commit()
            return Return.ok(job)

        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Job projection failed for estimate {event.estimate_id}: {e}")
            return Return.err(
                Error(
                    code="PROJECT_JOB_FAILED",
                    message="Failed to project estimate to job",
                    reason=str(e),
                )
            )
