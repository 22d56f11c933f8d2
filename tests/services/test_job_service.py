"""
Tests for job reads and lifecycle mutations
"""
import pytest
from unittest.mock import Mock
from sqlalchemy.exc import OperationalError
from api.services.job_service import JobService
from db.client import DataClient
from db.models import Job
from db.repositories.job_repository import JobRepository
from db.repositories.user_repository import UserRepository


@pytest.fixture
def job_service(session, add_user):
    add_user("alice")
    add_user("bob")
    client = DataClient.for_user(session, "alice")
    return JobService(
        JobRepository(client),
        UserRepository(client),
        service_job_repo=JobRepository(DataClient.for_service(session)),
    )


def _failing_repo(method_name: str):
    repo = Mock(spec=JobRepository)
    getattr(repo, method_name).side_effect = OperationalError("SELECT", {}, Exception("connection lost"))
    return repo


class TestInsertJob:
    def test_creates_pending_job_for_current_user(self, job_service, session):
        jobs = job_service.insert_job()
        assert len(jobs) == 1
        assert jobs[0].user_id == "alice"
        assert jobs[0].status == "pending"
        assert jobs[0].credits is None
        assert session.query(Job).count() == 1

    def test_without_profile_returns_empty(self, session):
        client = DataClient.for_user(session, "ghost")
        service = JobService(JobRepository(client), UserRepository(client))
        assert service.insert_job() == []
        assert session.query(Job).count() == 0


class TestUpdateJob:
    def test_update_by_id(self, job_service, add_job):
        job = add_job("alice")
        updated = job_service.update_job(job.id, {"status": "processing", "credits": 120})
        assert [j.id for j in updated] == [job.id]
        assert updated[0].status == "processing"
        assert updated[0].credits == 120

    def test_update_by_id_twice_is_idempotent(self, job_service, add_job, session):
        job = add_job("alice")
        fields = {"status": "completed", "credits": 75, "processed_video_url": "https://cdn.example/out.mp4"}
        job_service.update_job(job.id, fields)
        first = {k: getattr(session.get(Job, job.id), k) for k in fields}
        job_service.update_job(job.id, fields)
        session.expire_all()
        second = {k: getattr(session.get(Job, job.id), k) for k in fields}
        assert first == second == fields

    def test_update_unknown_id_returns_empty(self, job_service):
        assert job_service.update_job("missing", {"status": "failed"}) == []

    def test_update_other_users_job_returns_empty(self, job_service, add_job):
        job = add_job("bob")
        assert job_service.update_job(job.id, {"status": "failed"}) == []

    def test_store_failure_returns_empty(self):
        service = JobService(_failing_repo("update_by_id"), Mock(spec=UserRepository))
        assert service.update_job("job-1", {"status": "failed"}) == []

    def test_update_by_original_video_url(self, job_service, add_job):
        job = add_job("alice", original_video_url="https://videos.example/talk.mp4")
        add_job("alice", original_video_url="https://videos.example/other.mp4")
        updated = job_service.update_job_by_original_video_url(
            "https://videos.example/talk.mp4", {"status": "transcribing", "transcription_id": "tr_9"}
        )
        assert [j.id for j in updated] == [job.id]
        assert updated[0].transcription_id == "tr_9"

    def test_update_by_original_video_url_failure_returns_empty(self):
        service = JobService(_failing_repo("update_by_original_video_url"), Mock(spec=UserRepository))
        assert service.update_job_by_original_video_url("https://videos.example/a.mp4", {}) == []


class TestUpdateByTranscriptionId:
    def test_reaches_any_users_job(self, job_service, add_job):
        job = add_job("bob", transcription_id="tr_42")
        updated = job_service.update_job_by_transcription_id("tr_42", {"status": "completed"})
        assert [j.id for j in updated] == [job.id]
        assert updated[0].status == "completed"

    def test_no_matching_job_returns_empty(self, job_service, add_job):
        add_job("alice", transcription_id="tr_1")
        assert job_service.update_job_by_transcription_id("tr_unknown", {"status": "completed"}) == []

    def test_without_service_credential_returns_empty(self, session, add_job, add_user):
        add_user("alice")
        add_job("alice", transcription_id="tr_1")
        client = DataClient.for_user(session, "alice")
        service = JobService(JobRepository(client), UserRepository(client))
        assert service.update_job_by_transcription_id("tr_1", {"status": "completed"}) == []

    def test_store_failure_returns_empty(self):
        service = JobService(
            Mock(spec=JobRepository),
            Mock(spec=UserRepository),
            service_job_repo=_failing_repo("update_by_transcription_id"),
        )
        assert service.update_job_by_transcription_id("tr_1", {"status": "completed"}) == []


class TestUpdateJobFromPipeline:
    def test_charges_any_users_job(self, job_service, add_job):
        job = add_job("bob")
        updated = job_service.update_job_from_pipeline(job.id, {"credits": 250, "transcription_id": "tr_9"})
        assert [j.id for j in updated] == [job.id]
        assert updated[0].credits == 250
        assert updated[0].transcription_id == "tr_9"

    def test_without_service_credential_returns_empty(self, session, add_job, add_user):
        add_user("alice")
        job = add_job("alice")
        client = DataClient.for_user(session, "alice")
        service = JobService(JobRepository(client), UserRepository(client))
        assert service.update_job_from_pipeline(job.id, {"credits": 1}) == []

    def test_store_failure_returns_empty(self):
        service = JobService(
            Mock(spec=JobRepository),
            Mock(spec=UserRepository),
            service_job_repo=_failing_repo("update_by_id"),
        )
        assert service.update_job_from_pipeline("job-1", {"credits": 1}) == []


class TestReads:
    def test_get_jobs_success(self, job_service, add_job):
        add_job("alice", credits=1)
        add_job("bob", credits=2)
        result = job_service.get_jobs()
        assert result.success is True
        assert [j.credits for j in result.data] == [1]

    def test_get_jobs_failure(self):
        service = JobService(_failing_repo("list_all"), Mock(spec=UserRepository))
        result = service.get_jobs()
        assert result.success is False
        assert result.data == []
        assert result.error is not None

    def test_get_jobs_not_deleted(self, job_service, add_job):
        kept = add_job("alice")
        add_job("alice", is_deleted=True)
        add_job("bob")
        assert [j.id for j in job_service.get_jobs_not_deleted()] == [kept.id]

    def test_get_jobs_not_deleted_failure_returns_none(self):
        user_repo = Mock(spec=UserRepository)
        user_repo.get_current_user.return_value = Mock(id="alice")
        service = JobService(_failing_repo("list_not_deleted"), user_repo)
        assert service.get_jobs_not_deleted() is None

    def test_get_jobs_between_dates_failure_returns_none(self):
        service = JobService(_failing_repo("list_between"), Mock(spec=UserRepository))
        assert service.get_jobs_between_dates("alice", None, None) is None
