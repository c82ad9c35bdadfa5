"""Job use cases"""
from .project_estimate import ProjectEstimateToJob, job_status_for
from .manage_jobs import CreateJob, ListJobs, UpdateJob, DeleteJob
from .dtos import CreateJobInput, UpdateJobInput, JobResponseDTO, ListJobsResponseDTO

__all__ = [
    "ProjectEstimateToJob",
    "job_status_for",
    "CreateJob",
    "ListJobs",
    "UpdateJob",
    "DeleteJob",
    "CreateJobInput",
    "UpdateJobInput",
    "JobResponseDTO",
    "ListJobsResponseDTO",
]
