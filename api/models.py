from pydantic import BaseModel, ConfigDict, Field, field_validator, constr
from datetime import datetime
from typing import Optional, Union
from db.models.job import (
    JOB_PENDING,
    JOB_PROCESSING,
    JOB_TRANSCRIBING,
    JOB_COMPLETED,
    JOB_FAILED,
)

JOB_STATUSES = (JOB_PENDING, JOB_PROCESSING, JOB_TRANSCRIBING, JOB_COMPLETED, JOB_FAILED)


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    status: Optional[str]
    created_at: Optional[datetime]
    credits: Optional[int]
    is_deleted: bool
    original_video_url: Optional[str]
    transcription_id: Optional[str]
    processed_video_url: Optional[str]
    transcript: Optional[str]


class JobUpdate(BaseModel):
    """Fields a job's owner may change. Charging and transcription ids are pipeline-only."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[str] = None
    original_video_url: Optional[str] = None
    processed_video_url: Optional[str] = None
    transcript: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        if value is not None and value not in JOB_STATUSES:
            raise ValueError(f"status must be one of {', '.join(JOB_STATUSES)}")
        return value


class PipelineJobUpdate(JobUpdate):
    credits: Optional[int] = None
    transcription_id: Optional[str] = None


class JobUrlUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    original_video_url: constr(min_length=1)  # type: ignore
    fields: JobUpdate


class TranscriptionCallback(BaseModel):
    transcript_id: constr(min_length=1)  # type: ignore
    status: str
    text: Optional[str] = None


class CreditBalanceResponse(BaseModel):
    remaining: Union[int, float]
    out_of: Union[int, float] = Field(serialization_alias="outOf")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: Optional[str]
    avatar_url: Optional[str]


class PriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: Optional[str]
    description: Optional[str]
    unit_amount: Optional[int]
    currency: Optional[str]
    type: Optional[str]
    interval: Optional[str]
    interval_count: Optional[int]
    trial_period_days: Optional[int]


class ProductResponse(BaseModel):
    id: str
    name: Optional[str]
    description: Optional[str]
    image: Optional[str]
    metadata: dict
    prices: list[PriceResponse]


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: Optional[str]
    price_id: Optional[str]
    quantity: Optional[int]
    cancel_at_period_end: Optional[bool]
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]


class CheckoutRequest(BaseModel):
    price_id: constr(min_length=1)  # type: ignore


class CheckoutResponse(BaseModel):
    url: str
