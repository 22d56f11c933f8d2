from fastapi import APIRouter, Request, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse
from typing import Optional
from api.dependencies import (
    get_billing_service,
    get_checkout_billing_service,
    get_credit_service,
    get_optional_session,
    get_user_service,
)
from api.services.auth_service import AuthSession
from api.services.billing_service import BillingService, BillingServiceException
from api.services.credit_service import CreditService
from api.services.user_service import UserService
from .utils import render_template, require_auth

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def pricing_ui(
    request: Request,
    current_session: Optional[AuthSession] = Depends(get_optional_session),
    billing_service: BillingService = Depends(get_billing_service),
):
    return render_template(
        request,
        "pricing.html",
        {
            "current_session": current_session,
            "products": billing_service.get_active_products_with_prices(),
            "subscription": billing_service.get_subscription() if current_session else None,
        },
    )


@router.get("/subscription", response_class=HTMLResponse)
@require_auth
async def subscription_ui(
    request: Request,
    current_session: Optional[AuthSession] = Depends(get_optional_session),
    user_service: UserService = Depends(get_user_service),
    billing_service: BillingService = Depends(get_billing_service),
    credit_service: CreditService = Depends(get_credit_service),
):
    return render_template(
        request,
        "subscription.html",
        {
            "current_session": current_session,
            "user": user_service.get_user_details(),
            "subscription": billing_service.get_subscription(),
            "balance": credit_service.get_credit_balance(),
        },
    )


@router.post("/checkout/ui")
@require_auth
async def checkout_ui(
    request: Request,
    price_id: str = Form(...),
    current_session: Optional[AuthSession] = Depends(get_optional_session),
    billing_service: BillingService = Depends(get_checkout_billing_service),
):
    try:
        url = billing_service.create_checkout_session(
            current_session, price_id, str(request.base_url).rstrip("/")
        )
        return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)
    except BillingServiceException as e:
        return render_template(
            request,
            "pricing.html",
            {
                "current_session": current_session,
                "products": billing_service.get_active_products_with_prices(),
                "error": str(e),
            },
            status_code=400,
        )
