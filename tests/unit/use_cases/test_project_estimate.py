"""Unit tests for the estimate to job projection"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.jobs import ProjectEstimateToJob, job_status_for
from src.domain.events import EstimateCreated, EstimateStatusChanged
from src.domain.job import Job, JobStatus


def build_job(**overrides) -> Job:
    data = {
        "id": "job_1",
        "owner_id": "owner_1",
        "estimate_id": "est_1",
        "client_name": "Jane",
        "project_type": "Kitchen",
        "status": JobStatus.DRAFT,
        "total": Decimal("108.00"),
        "date": date(2024, 1, 10),
    }
    data.update(overrides)
    return Job(**data)


@pytest.fixture
def mock_job_repo():
    repo = MagicMock()
    repo.get_by_estimate_id = AsyncMock(return_value=None)
    repo.create = AsyncMock(side_effect=lambda j: j)
    repo.update = AsyncMock(side_effect=lambda j: j)
    return repo


@pytest.mark.parametrize(
    "estimate_status,expected",
    [
        ("approved", JobStatus.APPROVED),
        ("sent", JobStatus.SENT),
        ("draft", JobStatus.DRAFT),
        ("rejected", JobStatus.DRAFT),
    ],
)
def test_job_status_mapping(estimate_status, expected):
    assert job_status_for(estimate_status) == expected


@pytest.mark.asyncio
class TestProjectEstimateToJob:
    async def test_created_event_creates_job(self, mock_uow, mock_job_repo):
        use_case = ProjectEstimateToJob(mock_uow, mock_job_repo)

        result = await use_case.execute(
            EstimateCreated(
                estimate_id="est_1",
                owner_id="owner_1",
                client_name="Jane",
                project_name="Kitchen",
                status="draft",
                total=Decimal("108.00"),
            )
        )

        assert result.is_ok()
        job = mock_job_repo.create.call_args.args[0]
        assert job.estimate_id == "est_1"
        assert job.project_type == "Kitchen"
        assert job.status == JobStatus.DRAFT
        mock_uow.commit.assert_called_once()

    async def test_status_change_updates_status_and_total(self, mock_uow, mock_job_repo):
        job = build_job()
        mock_job_repo.get_by_estimate_id = AsyncMock(return_value=job)
        use_case = ProjectEstimateToJob(mock_uow, mock_job_repo)

        await use_case.execute(
            EstimateStatusChanged(
                estimate_id="est_1", owner_id="owner_1", status="approved", total=Decimal("120.00")
            )
        )

        assert job.status == JobStatus.APPROVED
        assert job.total == Decimal("120.00")

    async def test_owner_managed_status_is_kept(self, mock_uow, mock_job_repo):
        job = build_job(status=JobStatus.IN_PROGRESS)
        mock_job_repo.get_by_estimate_id = AsyncMock(return_value=job)
        use_case = ProjectEstimateToJob(mock_uow, mock_job_repo)

        await use_case.execute(
            EstimateStatusChanged(
                estimate_id="est_1", owner_id="owner_1", status="sent", total=Decimal("108.00")
            )
        )

        assert job.status == JobStatus.IN_PROGRESS

    async def test_status_event_seen_first_creates_job(self, mock_uow, mock_job_repo):
        use_case = ProjectEstimateToJob(mock_uow, mock_job_repo)

        result = await use_case.execute(
            EstimateStatusChanged(
                estimate_id="est_9",
                owner_id="owner_1",
                status="approved",
                total=Decimal("250.00"),
                client_name="Jane",
                project_name="Fence",
            )
        )

        assert result.is_ok()
        job = mock_job_repo.create.call_args.args[0]
        assert job.estimate_id == "est_9"
        assert job.client_name == "Jane"
        assert job.project_type == "Fence"
        assert job.status == JobStatus.APPROVED
        assert job.total == Decimal("250.00")
        mock_uow.commit.assert_called_once()

    async def test_late_created_event_keeps_newer_status(self, mock_uow, mock_job_repo):
        job = build_job(status=JobStatus.APPROVED)
        mock_job_repo.get_by_estimate_id = AsyncMock(return_value=job)
        use_case = ProjectEstimateToJob(mock_uow, mock_job_repo)

        result = await use_case.execute(
            EstimateCreated(
                estimate_id="est_1",
                owner_id="owner_1",
                client_name="Jane",
                project_name="Kitchen",
                status="draft",
                total=Decimal("108.00"),
            )
        )

        assert result.value.status == JobStatus.APPROVED
        mock_job_repo.create.assert_not_called()
        mock_job_repo.update.assert_not_called()
        mock_uow.commit.assert_not_called()

    async def test_store_failure_is_reported_not_raised(self, mock_uow, mock_job_repo):
        mock_job_repo.get_by_estimate_id = AsyncMock(side_effect=Exception("db down"))
        use_case = ProjectEstimateToJob(mock_uow, mock_job_repo)

        result = await use_case.execute(
            EstimateStatusChanged(
                estimate_id="est_1", owner_id="owner_1", status="sent", total=Decimal("1.00")
            )
        )

        assert result.error.code == "PROJECT_JOB_FAILED"
        mock_uow.rollback.assert_called_once()
