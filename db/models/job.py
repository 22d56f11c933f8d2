from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from db.base import Base
from datetime import datetime, timezone
import uuid

# Job status constants
JOB_PENDING = "pending"
JOB_PROCESSING = "processing"
JOB_TRANSCRIBING = "transcribing"
JOB_COMPLETED = "completed"
JOB_FAILED = "failed"


class Job(Base):
    __tablename__ = "jobs"
    __owner__ = "user_id"
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, default=JOB_PENDING)
    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
    credits = Column(Integer, nullable=True)  # Charged once processing has a cost
    is_deleted = Column(Boolean, default=False, nullable=False)
    original_video_url = Column(String, nullable=True, index=True)
    transcription_id = Column(String, nullable=True, index=True)
    processed_video_url = Column(String, nullable=True)
    transcript = Column(Text, nullable=True)
