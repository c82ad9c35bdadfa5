"""Job API Routes

Jobs mirror estimates automatically; owners can also add, edit and remove
jobs by hand.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.job_request import CreateJobRequest
from src.app.use_cases.jobs import (
    CreateJob,
    ListJobs,
    UpdateJob,
    DeleteJob,
    CreateJobInput,
    UpdateJobInput,
    JobResponseDTO,
    ListJobsResponseDTO,
)
from src.adapter.repositories.job_repository import SqlAlchemyJobRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.api.auth import get_owner_id
from src.api.error import raise_for_error

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=JobResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_job(
    request: CreateJobRequest,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = CreateJob(
        uow=SqlAlchemyUnitOfWork(session),
        job_repo=SqlAlchemyJobRepository(session),
    )
    result = await use_case.execute(CreateJobInput(owner_id=owner_id, **request.model_dump()))

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("", response_model=ListJobsResponseDTO)
async def list_jobs(
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    result = await ListJobs(SqlAlchemyJobRepository(session)).execute(owner_id)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.patch("/{job_id}", response_model=JobResponseDTO)
async def update_job(
    job_id: str,
    request: UpdateJobInput,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = UpdateJob(
        uow=SqlAlchemyUnitOfWork(session),
        job_repo=SqlAlchemyJobRepository(session),
    )
    result = await use_case.execute(owner_id, job_id, request)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: str,
    owner_id: str = Depends(get_owner_id),
    session: AsyncSession = Depends(get_session),
):
    use_case = DeleteJob(
        uow=SqlAlchemyUnitOfWork(session),
        job_repo=SqlAlchemyJobRepository(session),
    )
    result = await use_case.execute(owner_id, job_id)

    if result.is_err():
        raise_for_error(result.error)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
