from datetime import datetime
from db.client import DataClient
from db.models import Job


class JobRepository:
    def __init__(self, client: DataClient):
        self.client = client

    def create(self, job: Job) -> Job:
        self.client.check_write(job)
        self.client.db.add(job)
        self.client.commit()
        self.client.db.refresh(job)
        return job

    def list_all(self) -> list[Job]:
        return self.client.query(Job).order_by(Job.created_at.desc()).all()

    def list_not_deleted(self, user_id: str) -> list[Job]:
        return (
            self.client.query(Job)
            .filter(Job.user_id == user_id, Job.is_deleted == False)  # noqa: E712
            .order_by(Job.created_at.desc())
            .all()
        )

    def list_between(self, user_id: str, start: datetime, end: datetime) -> list[Job]:
        return (
            self.client.query(Job)
            .filter(
                Job.user_id == user_id,
                Job.created_at >= start,
                Job.created_at <= end,
            )
            .all()
        )

    def update_where(self, column, value, update_data: dict) -> list[Job]:
        """Apply a dict of fields to every visible job whose column equals value"""
        jobs = self.client.query(Job).filter(column == value).all()
        for job in jobs:
            for key, field_value in update_data.items():
                if hasattr(job, key):
                    setattr(job, key, field_value)
            self.client.check_write(job)
        self.client.commit()
        for job in jobs:
            self.client.db.refresh(job)
        return jobs

    def update_by_id(self, job_id: str, update_data: dict) -> list[Job]:
        return self.update_where(Job.id, job_id, update_data)

    def update_by_original_video_url(self, url: str, update_data: dict) -> list[Job]:
        return self.update_where(Job.original_video_url, url, update_data)

    def update_by_transcription_id(self, transcription_id: str, update_data: dict) -> list[Job]:
        return self.update_where(Job.transcription_id, transcription_id, update_data)
