from fastapi import APIRouter, Depends, HTTPException, status
from api.dependencies import get_job_service, get_current_session, get_pipeline_job_service
from api.models import JobResponse, JobUpdate, JobUrlUpdate, PipelineJobUpdate
from api.services.auth_service import AuthSession
from api.services.job_service import JobService

router = APIRouter()


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(
    current_session: AuthSession = Depends(get_current_session),
    job_service: JobService = Depends(get_job_service),
):
    jobs = job_service.get_jobs_not_deleted()
    if jobs is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Jobs unavailable")
    return jobs


@router.post("/jobs", response_model=list[JobResponse], status_code=status.HTTP_201_CREATED)
def create_job(
    current_session: AuthSession = Depends(get_current_session),
    job_service: JobService = Depends(get_job_service),
):
    jobs = job_service.insert_job()
    if not jobs:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Could not create job")
    return jobs


# Declared before /jobs/{job_id} so the path is not read as an id
@router.patch("/jobs/by-video-url", response_model=list[JobResponse])
def update_job_by_video_url(
    update: JobUrlUpdate,
    current_session: AuthSession = Depends(get_current_session),
    job_service: JobService = Depends(get_job_service),
):
    return job_service.update_job_by_original_video_url(
        update.original_video_url, update.fields.model_dump(exclude_unset=True)
    )


@router.patch("/jobs/{job_id}", response_model=list[JobResponse])
def update_job(
    job_id: str,
    update: JobUpdate,
    current_session: AuthSession = Depends(get_current_session),
    job_service: JobService = Depends(get_job_service),
):
    jobs = job_service.update_job(job_id, update.model_dump(exclude_unset=True))
    if not jobs:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return jobs


@router.delete("/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    job_id: str,
    current_session: AuthSession = Depends(get_current_session),
    job_service: JobService = Depends(get_job_service),
):
    # Jobs are only ever flagged, never removed
    if not job_service.update_job(job_id, {"is_deleted": True}):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")


@router.patch("/pipeline/jobs/{job_id}", response_model=list[JobResponse])
def update_job_from_pipeline(
    job_id: str,
    update: PipelineJobUpdate,
    job_service: JobService = Depends(get_pipeline_job_service),
):
    """Processing pipeline only: records the credits charged and the transcription id."""
    jobs = job_service.update_job_from_pipeline(job_id, update.model_dump(exclude_unset=True))
    if not jobs:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return jobs
