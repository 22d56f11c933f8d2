from fastapi import APIRouter, Depends, HTTPException, Request
from api.dependencies import get_callback_job_service, get_webhook_service
from api.models import TranscriptionCallback
from api.services.job_service import JobService
from api.services.webhook_service import WebhookService, WebhookServiceException
from db.models.job import JOB_COMPLETED, JOB_FAILED, JOB_TRANSCRIBING
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

# Transcription service status -> job status
TRANSCRIPTION_STATUSES = {
    "queued": JOB_TRANSCRIBING,
    "processing": JOB_TRANSCRIBING,
    "completed": JOB_COMPLETED,
    "error": JOB_FAILED,
}


@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    webhook_service: WebhookService = Depends(get_webhook_service),
):
    payload = await request.body()
    sig_header = request.headers.get("Stripe-Signature")
    try:
        event = webhook_service.construct_event(payload, sig_header)
    except WebhookServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
    handled = webhook_service.handle_event(event)
    return {"received": True, "handled": handled}


@router.post("/webhooks/transcription")
def transcription_webhook(
    callback: TranscriptionCallback,
    job_service: JobService = Depends(get_callback_job_service),
):
    """Status callback from the transcription service. Carries no user session."""
    updated_fields = {"status": TRANSCRIPTION_STATUSES.get(callback.status, JOB_TRANSCRIBING)}
    if callback.text is not None:
        updated_fields["transcript"] = callback.text
    jobs = job_service.update_job_by_transcription_id(callback.transcript_id, updated_fields)
    if not jobs:
        logger.warning(f"Transcription callback matched no job: {callback.transcript_id}")
    return {"updated": len(jobs)}
