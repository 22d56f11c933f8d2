from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from db.client import DATA_ACCESS_ERRORS
from db.models import Job
from db.models.job import JOB_PENDING
from db.repositories.job_repository import JobRepository
from db.repositories.user_repository import UserRepository
import logging

logger = logging.getLogger(__name__)


@dataclass
class JobListResult:
    success: bool
    data: list = field(default_factory=list)
    error: Optional[Exception] = None


class JobService:
    """
    Job reads and lifecycle mutations.

    Mutators return the rows they touched and an empty list when the store
    refused the request; they never raise. Updates are unconditional, the last
    write to a row wins.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        user_repo: UserRepository,
        service_job_repo: Optional[JobRepository] = None,
    ):
        self.job_repo = job_repo
        self.user_repo = user_repo
        # Privileged repository, only wired in for external callbacks
        self.service_job_repo = service_job_repo

    def get_jobs(self) -> JobListResult:
        try:
            return JobListResult(success=True, data=self.job_repo.list_all())
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"getJobs error: {e}")
            return JobListResult(success=False, error=e)

    def get_jobs_not_deleted(self) -> Optional[list[Job]]:
        try:
            user = self.user_repo.get_current_user()
            if user is None:
                return []
            return self.job_repo.list_not_deleted(user.id)
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"getJobsNotDeleted error: {e}")
            return None

    def get_jobs_between_dates(
        self, user_id: str, start_date: datetime, end_date: datetime
    ) -> Optional[list[Job]]:
        try:
            return self.job_repo.list_between(user_id, start_date, end_date)
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"getJobsBetweenDates error: {e}")
            return None

    def insert_job(self) -> list[Job]:
        try:
            user = self.user_repo.get_current_user()
            job = Job(user_id=user.id if user else None, status=JOB_PENDING)
            job = self.job_repo.create(job)
            logger.info(f"Created job {job.id} for user {job.user_id}")
            return [job]
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"insertJob error: {e}")
            return []

    def update_job(self, job_id: str, updated_fields: dict) -> list[Job]:
        try:
            return self.job_repo.update_by_id(job_id, updated_fields)
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"updateJob error: {e}")
            return []

    def update_job_by_original_video_url(
        self, original_video_url: str, updated_fields: dict
    ) -> list[Job]:
        try:
            return self.job_repo.update_by_original_video_url(
                original_video_url, updated_fields
            )
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"updateJobByOriginalVideoUrl error: {e}")
            return []

    def update_job_from_pipeline(self, job_id: str, updated_fields: dict) -> list[Job]:
        """Charges credits and records transcription ids on any user's job."""
        if self.service_job_repo is None:
            logger.error("updateJobFromPipeline error: no service credential")
            return []
        try:
            jobs = self.service_job_repo.update_by_id(job_id, updated_fields)
            logger.info(f"Pipeline updated job {job_id}: {sorted(updated_fields)}")
            return jobs
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"updateJobFromPipeline error: {e}")
            return []

    def update_job_by_transcription_id(
        self, transcription_id: str, updated_fields: dict
    ) -> list[Job]:
        """Runs under the service credential; the caller has no user session."""
        if self.service_job_repo is None:
            logger.error("updateJobByTranscriptionId error: no service credential")
            return []
        try:
            jobs = self.service_job_repo.update_by_transcription_id(
                transcription_id, updated_fields
            )
            logger.info(f"Updated {len(jobs)} job(s) for transcription {transcription_id}")
            return jobs
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"updateJobByTranscriptionId error: {e}")
            return []
