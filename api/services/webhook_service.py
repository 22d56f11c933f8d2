from datetime import datetime, timezone
from typing import Optional
from db.client import DATA_ACCESS_ERRORS
from db.repositories.product_repository import ProductRepository
from db.repositories.subscription_repository import SubscriptionRepository
from db.repositories.user_repository import CustomerRepository
import logging
import os
import stripe

logger = logging.getLogger(__name__)

PRODUCT_EVENTS = {"product.created", "product.updated"}
PRICE_EVENTS = {"price.created", "price.updated"}
SUBSCRIPTION_EVENTS = {
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
}


class WebhookServiceException(Exception):
    pass


def _field(obj, key, default=None):
    """Read a key from a Stripe object or a plain dict"""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _to_datetime(timestamp: Optional[int]) -> Optional[datetime]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _first_item(subscription):
    items = _field(_field(subscription, "items"), "data", [])
    return items[0] if items else None


class WebhookService:
    """Mirrors Stripe catalog and subscription state. Runs on the service client."""

    def __init__(
        self,
        product_repo: ProductRepository,
        subscription_repo: SubscriptionRepository,
        customer_repo: CustomerRepository,
    ):
        self.product_repo = product_repo
        self.subscription_repo = subscription_repo
        self.customer_repo = customer_repo
        stripe.api_key = os.getenv("STRIPE_SECRET_KEY")
        self.webhook_secret = os.getenv("STRIPE_WEBHOOK_SECRET")

    def construct_event(self, payload: bytes, sig_header: Optional[str]):
        try:
            return stripe.Webhook.construct_event(payload, sig_header, self.webhook_secret)
        except ValueError:
            logger.error("Invalid Stripe webhook payload")
            raise WebhookServiceException("Invalid payload")
        except stripe.SignatureVerificationError:
            logger.error("Invalid Stripe webhook signature")
            raise WebhookServiceException("Invalid signature")

    def handle_event(self, event) -> bool:
        """Apply one event; returns False when it was ignored or could not be stored"""
        event_type = event["type"]
        obj = event["data"]["object"]
        try:
            if event_type in PRODUCT_EVENTS:
                self.upsert_product_record(obj)
            elif event_type in PRICE_EVENTS:
                self.upsert_price_record(obj)
            elif event_type == "product.deleted":
                self.product_repo.delete_product(obj["id"])
            elif event_type == "price.deleted":
                self.product_repo.delete_price(obj["id"])
            elif event_type in SUBSCRIPTION_EVENTS:
                self.manage_subscription_status_change(obj)
            elif event_type == "checkout.session.completed":
                if _field(obj, "mode") != "subscription":
                    return True
                subscription = stripe.Subscription.retrieve(obj["subscription"])
                self.manage_subscription_status_change(subscription)
            else:
                logger.info(f"Ignoring Stripe event {event_type}")
                return False
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"Stripe webhook {event_type} failed: {e}")
            return False
        except (stripe.StripeError, WebhookServiceException) as e:
            logger.error(f"Stripe webhook {event_type} failed: {e}")
            return False
        logger.info(f"Handled Stripe event {event_type}")
        return True

    def upsert_product_record(self, product) -> None:
        self.product_repo.upsert_product(
            {
                "id": product["id"],
                "active": _field(product, "active", False),
                "name": _field(product, "name"),
                "description": _field(product, "description"),
                "image": (_field(product, "images") or [None])[0],
                "metadata_": dict(_field(product, "metadata", {})),
            }
        )

    def upsert_price_record(self, price) -> None:
        recurring = _field(price, "recurring")
        self.product_repo.upsert_price(
            {
                "id": price["id"],
                "product_id": _field(price, "product"),
                "active": _field(price, "active", False),
                "description": _field(price, "nickname"),
                "unit_amount": _field(price, "unit_amount"),
                "currency": _field(price, "currency"),
                "type": _field(price, "type"),
                "interval": _field(recurring, "interval"),
                "interval_count": _field(recurring, "interval_count"),
                "trial_period_days": _field(recurring, "trial_period_days"),
                "metadata_": dict(_field(price, "metadata", {})),
            }
        )

    def manage_subscription_status_change(self, subscription) -> None:
        customer_id = subscription["customer"]
        customer = self.customer_repo.get_by_stripe_customer_id(customer_id)
        if not customer:
            raise WebhookServiceException(f"No user for Stripe customer {customer_id}")

        item = _first_item(subscription)
        period_start = _field(subscription, "current_period_start") or _field(
            item, "current_period_start"
        )
        period_end = _field(subscription, "current_period_end") or _field(
            item, "current_period_end"
        )
        self.subscription_repo.upsert(
            {
                "id": subscription["id"],
                "user_id": customer.id,
                "status": _field(subscription, "status"),
                "metadata_": dict(_field(subscription, "metadata", {})),
                "price_id": _field(_field(item, "price"), "id"),
                "quantity": _field(item, "quantity"),
                "cancel_at_period_end": _field(subscription, "cancel_at_period_end", False),
                "created": _to_datetime(_field(subscription, "created")),
                "current_period_start": _to_datetime(period_start),
                "current_period_end": _to_datetime(period_end),
                "ended_at": _to_datetime(_field(subscription, "ended_at")),
                "cancel_at": _to_datetime(_field(subscription, "cancel_at")),
                "canceled_at": _to_datetime(_field(subscription, "canceled_at")),
                "trial_start": _to_datetime(_field(subscription, "trial_start")),
                "trial_end": _to_datetime(_field(subscription, "trial_end")),
            }
        )
        logger.info(f"Synced subscription {subscription['id']} for user {customer.id}")
