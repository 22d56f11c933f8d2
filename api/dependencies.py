# api/dependencies.py
from typing import Optional
from fastapi import Depends, Header, Request, HTTPException, status
from sqlalchemy.orm import Session
from db.client import DataClient
from db.engine import SessionLocal, get_service_sessionmaker
from db.repositories.job_repository import JobRepository
from db.repositories.product_repository import ProductRepository
from db.repositories.subscription_repository import SubscriptionRepository
from db.repositories.user_repository import UserRepository, CustomerRepository
from api.services.auth_service import AuthService, AuthSession
from api.services.billing_service import BillingService
from api.services.credit_service import CreditService
from api.services.job_service import JobService
from api.services.user_service import UserService
from api.services.webhook_service import WebhookService
import os
import secrets


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_service_db():
    """Session on the privileged connection. Only webhook and callback routes use it."""
    db = get_service_sessionmaker()()
    try:
        yield db
    finally:
        db.close()


def get_auth_service():
    return AuthService()


def get_optional_session(
    request: Request, auth_service: AuthService = Depends(get_auth_service)
) -> Optional[AuthSession]:
    return auth_service.get_session(request)


def get_current_session(
    session: Optional[AuthSession] = Depends(get_optional_session),
) -> AuthSession:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return session


def get_user_client(
    db: Session = Depends(get_db),
    session: Optional[AuthSession] = Depends(get_optional_session),
) -> DataClient:
    return DataClient.for_user(db, session.user_id if session else None)


def get_service_client(db: Session = Depends(get_service_db)) -> DataClient:
    return DataClient.for_service(db)


def get_user_service(client: DataClient = Depends(get_user_client)):
    return UserService(UserRepository(client))


def get_job_service(client: DataClient = Depends(get_user_client)):
    return JobService(JobRepository(client), UserRepository(client))


def get_callback_job_service(
    client: DataClient = Depends(get_user_client),
    service_client: DataClient = Depends(get_service_client),
):
    return JobService(
        JobRepository(client),
        UserRepository(client),
        service_job_repo=JobRepository(service_client),
    )


def get_billing_service(client: DataClient = Depends(get_user_client)):
    return BillingService(SubscriptionRepository(client), ProductRepository(client))


def get_checkout_billing_service(
    client: DataClient = Depends(get_user_client),
    service_client: DataClient = Depends(get_service_client),
):
    return BillingService(
        SubscriptionRepository(client),
        ProductRepository(client),
        customer_repo=CustomerRepository(service_client),
    )


def get_credit_service(
    billing_service: BillingService = Depends(get_billing_service),
    job_service: JobService = Depends(get_job_service),
):
    return CreditService(billing_service, job_service)


def get_webhook_service(service_client: DataClient = Depends(get_service_client)):
    return WebhookService(
        ProductRepository(service_client),
        SubscriptionRepository(service_client),
        CustomerRepository(service_client),
    )


def require_pipeline_key(x_pipeline_key: Optional[str] = Header(None)):
    expected = os.getenv("PIPELINE_API_KEY")
    if not expected or not x_pipeline_key or not secrets.compare_digest(x_pipeline_key, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid pipeline key")


def get_pipeline_job_service(
    _: None = Depends(require_pipeline_key),
    service_client: DataClient = Depends(get_service_client),
):
    repo = JobRepository(service_client)
    return JobService(repo, UserRepository(service_client), service_job_repo=repo)
