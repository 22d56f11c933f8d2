from fastapi import APIRouter, Request, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address
from api.dependencies import get_auth_service, get_db
from api.services.auth_service import (
    AuthService,
    AuthServiceException,
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    CODE_VERIFIER_COOKIE,
    create_code_challenge,
    create_code_verifier,
)
from api.services.user_service import UserService
from db.client import DataClient
from db.repositories.user_repository import UserRepository
from .utils import render_template
import logging
import os
import requests

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)
logger = logging.getLogger(__name__)

# Where the sign-in flow lands once the provider sends the user back
AFTER_SIGN_IN_PATH = "/subscription"


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _providers() -> list[str]:
    return [p.strip() for p in os.getenv("AUTH_PROVIDERS", "github").split(",") if p.strip()]


@router.get("/signin", response_class=HTMLResponse)
async def signin_ui(request: Request):
    return render_template(
        request,
        "signin.html",
        {"providers": _providers(), "message": request.query_params.get("message")},
    )


@router.get("/signin/{provider}")
async def signin_with_provider(
    request: Request,
    provider: str,
    auth_service: AuthService = Depends(get_auth_service),
):
    if provider not in _providers():
        return render_template(
            request, "signin.html", {"providers": _providers(), "error": "Unknown provider"}, status_code=400
        )
    code_verifier = create_code_verifier()
    url = auth_service.get_authorize_url(
        provider,
        redirect_to=f"{_origin(request)}/auth/callback",
        code_challenge=create_code_challenge(code_verifier),
    )
    response = RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(CODE_VERIFIER_COOKIE, code_verifier, httponly=True, samesite="lax", max_age=600)
    return response


@router.get("/auth/callback")
@limiter.limit("30/minute")
def auth_callback(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    db: Session = Depends(get_db),
):
    """
    OAuth redirect target. Exchanges ?code= for a session when present and
    always sends the user on to the subscription page, whatever the outcome.
    """
    response = RedirectResponse(url=f"{_origin(request)}{AFTER_SIGN_IN_PATH}")
    code = request.query_params.get("code")
    if not code:
        return response

    try:
        payload = auth_service.exchange_code_for_session(
            code, request.cookies.get(CODE_VERIFIER_COOKIE)
        )
    except (AuthServiceException, requests.RequestException, ValueError) as e:
        logger.error(f"exchangeCodeForSession error: {e}")
        return response

    access_token = payload.get("access_token")
    if access_token:
        response.set_cookie(
            ACCESS_TOKEN_COOKIE,
            access_token,
            httponly=True,
            samesite="lax",
            max_age=payload.get("expires_in"),
        )
    if payload.get("refresh_token"):
        response.set_cookie(REFRESH_TOKEN_COOKIE, payload["refresh_token"], httponly=True, samesite="lax")
    response.delete_cookie(CODE_VERIFIER_COOKIE)

    provider_user = payload.get("user") or {}
    if provider_user.get("id"):
        user_service = UserService(UserRepository(DataClient.for_user(db, provider_user["id"])))
        user_service.upsert_user_from_provider(provider_user)
    return response


@router.get("/signout")
async def signout():
    response = RedirectResponse(url="/signin", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return response
