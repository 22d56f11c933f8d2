from dataclasses import dataclass
from typing import Iterable, Optional, Union
from api.services.billing_service import BillingService
from api.services.job_service import JobService
from db.models import Job, Subscription
import logging
import math

logger = logging.getLogger(__name__)

# Allotment for users without a trialing or active subscription
FREE_TIER_CREDITS = 7_500

Number = Union[int, float]


@dataclass
class CreditBalance:
    remaining: Number
    out_of: Number
    # False when a lookup failed and the numbers are a best effort
    complete: bool = True


def parse_credits(value) -> Number:
    """Product metadata stores credits as a string; anything unparseable is 0"""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def sum_credits(jobs: Iterable[Job]) -> Number:
    return sum((job.credits or 0) for job in jobs)


def subscription_allotment(subscription: Subscription) -> Number:
    price = subscription.price
    product = price.product if price else None
    metadata = (product.metadata_ if product else None) or {}
    return parse_credits(metadata.get("credits"))


class CreditService:
    def __init__(self, billing_service: BillingService, job_service: JobService):
        self.billing_service = billing_service
        self.job_service = job_service

    def get_credit_balance(self) -> CreditBalance:
        """
        Remaining credits for the session's user.

        Subscribers get their plan's allotment minus the credits of their jobs
        created inside the current billing period (inclusive). Everyone else
        gets the free-tier allotment minus the credits of every job the
        session can list, with no period filter. Remaining is not floored at
        zero.
        """
        subscription: Optional[Subscription] = self.billing_service.get_subscription()

        if subscription:
            allotment = subscription_allotment(subscription)
            jobs = self.job_service.get_jobs_between_dates(
                subscription.user_id,
                subscription.current_period_start,
                subscription.current_period_end,
            )
            spent = sum_credits(jobs) if jobs is not None else 0
            return CreditBalance(
                remaining=allotment - spent,
                out_of=allotment,
                complete=jobs is not None,
            )

        result = self.job_service.get_jobs()
        spent = sum_credits(result.data) if result.success else 0
        if not result.success:
            logger.warning("Credit balance computed without job history")
        return CreditBalance(
            remaining=FREE_TIER_CREDITS - spent,
            out_of=FREE_TIER_CREDITS,
            complete=result.success,
        )
