from fastapi import APIRouter, Request, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse
from typing import Optional
from api.dependencies import get_credit_service, get_job_service, get_optional_session
from api.services.auth_service import AuthSession
from api.services.credit_service import CreditService
from api.services.job_service import JobService
from .utils import render_template, require_auth

router = APIRouter()


@router.get("/jobs/ui", response_class=HTMLResponse)
@require_auth
async def jobs_ui(
    request: Request,
    current_session: Optional[AuthSession] = Depends(get_optional_session),
    job_service: JobService = Depends(get_job_service),
    credit_service: CreditService = Depends(get_credit_service),
):
    jobs = job_service.get_jobs_not_deleted()
    return render_template(
        request,
        "jobs.html",
        {
            "current_session": current_session,
            "jobs": jobs or [],
            "error": "Could not load jobs" if jobs is None else None,
            "balance": credit_service.get_credit_balance(),
        },
    )


@router.post("/jobs/ui")
@require_auth
async def create_job_ui(
    request: Request,
    current_session: Optional[AuthSession] = Depends(get_optional_session),
    job_service: JobService = Depends(get_job_service),
):
    job_service.insert_job()
    return RedirectResponse(url="/jobs/ui", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/jobs/ui/{job_id}/delete")
@require_auth
async def delete_job_ui(
    request: Request,
    job_id: str,
    current_session: Optional[AuthSession] = Depends(get_optional_session),
    job_service: JobService = Depends(get_job_service),
):
    job_service.update_job(job_id, {"is_deleted": True})
    return RedirectResponse(url="/jobs/ui", status_code=status.HTTP_303_SEE_OTHER)
