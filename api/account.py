from fastapi import APIRouter, Depends, HTTPException, Request, status
from api.dependencies import (
    get_billing_service,
    get_checkout_billing_service,
    get_credit_service,
    get_current_session,
    get_user_service,
)
from api.models import (
    CheckoutRequest,
    CheckoutResponse,
    CreditBalanceResponse,
    PriceResponse,
    ProductResponse,
    SubscriptionResponse,
    UserResponse,
)
from api.services.auth_service import AuthSession
from api.services.billing_service import BillingService, BillingServiceException
from api.services.credit_service import CreditService
from api.services.user_service import UserService
from typing import Optional

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_me(
    current_session: AuthSession = Depends(get_current_session),
    user_service: UserService = Depends(get_user_service),
):
    user = user_service.get_user_details()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/credits", response_model=CreditBalanceResponse)
def get_credits(
    current_session: AuthSession = Depends(get_current_session),
    credit_service: CreditService = Depends(get_credit_service),
):
    balance = credit_service.get_credit_balance()
    return CreditBalanceResponse(remaining=balance.remaining, out_of=balance.out_of)


@router.get("/subscription", response_model=Optional[SubscriptionResponse])
def get_subscription(
    current_session: AuthSession = Depends(get_current_session),
    billing_service: BillingService = Depends(get_billing_service),
):
    return billing_service.get_subscription()


@router.get("/products", response_model=list[ProductResponse])
def list_products(billing_service: BillingService = Depends(get_billing_service)):
    return [
        ProductResponse(
            id=entry["product"].id,
            name=entry["product"].name,
            description=entry["product"].description,
            image=entry["product"].image,
            metadata=entry["product"].metadata_ or {},
            prices=[PriceResponse.model_validate(price) for price in entry["prices"]],
        )
        for entry in billing_service.get_active_products_with_prices()
    ]


@router.post("/checkout", response_model=CheckoutResponse)
def create_checkout(
    request: Request,
    checkout: CheckoutRequest,
    current_session: AuthSession = Depends(get_current_session),
    billing_service: BillingService = Depends(get_checkout_billing_service),
):
    origin = str(request.base_url).rstrip("/")
    try:
        url = billing_service.create_checkout_session(current_session, checkout.price_id, origin)
        return CheckoutResponse(url=url)
    except BillingServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
