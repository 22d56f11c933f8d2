from typing import Optional
from api.services.auth_service import AuthSession
from db.client import DATA_ACCESS_ERRORS
from db.models import Customer, Product, Subscription
from db.repositories.product_repository import ProductRepository
from db.repositories.subscription_repository import SubscriptionRepository
from db.repositories.user_repository import CustomerRepository
import logging
import os
import stripe

logger = logging.getLogger(__name__)


class BillingServiceException(Exception):
    def __init__(self, detail):
        super().__init__(detail)
        self.detail = detail

    def __str__(self):
        return str(self.detail)


def _product_sort_key(product: Product):
    index = (product.metadata_ or {}).get("index")
    try:
        return (0, float(index))
    except (TypeError, ValueError):
        return (1, 0.0)


class BillingService:
    def __init__(
        self,
        subscription_repo: SubscriptionRepository,
        product_repo: ProductRepository,
        customer_repo: Optional[CustomerRepository] = None,
    ):
        self.subscription_repo = subscription_repo
        self.product_repo = product_repo
        # Customers are private; this repository runs on the service client
        self.customer_repo = customer_repo
        stripe.api_key = os.getenv("STRIPE_SECRET_KEY")

    def get_subscription(self) -> Optional[Subscription]:
        try:
            return self.subscription_repo.get_current()
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"getSubscription error: {e}")
            return None

    def get_active_products_with_prices(self) -> list[dict]:
        """Active products ordered by metadata index, each with its active prices by amount"""
        try:
            products = self.product_repo.list_active()
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"getActiveProductsWithPrices error: {e}")
            return []
        result = []
        for product in sorted(products, key=_product_sort_key):
            prices = sorted(
                (price for price in product.prices if price.active),
                key=lambda price: price.unit_amount or 0,
            )
            result.append({"product": product, "prices": prices})
        return result

    def create_or_retrieve_customer(self, session: AuthSession) -> str:
        if self.customer_repo is None:
            raise BillingServiceException("Billing is not configured")
        try:
            customer = self.customer_repo.get_by_user_id(session.user_id)
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"Customer lookup failed for user {session.user_id}: {e}")
            raise BillingServiceException("Could not look up customer")
        if customer and customer.stripe_customer_id:
            return customer.stripe_customer_id

        try:
            stripe_customer = stripe.Customer.create(
                email=session.email,
                metadata={"user_id": session.user_id},
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe customer creation failed for user {session.user_id}: {e}")
            raise BillingServiceException("Could not create customer")

        try:
            self.customer_repo.create(
                Customer(id=session.user_id, stripe_customer_id=stripe_customer["id"])
            )
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"Saving customer for user {session.user_id} failed: {e}")
            raise BillingServiceException("Could not save customer")
        logger.info(f"Created Stripe customer {stripe_customer['id']} for user {session.user_id}")
        return stripe_customer["id"]

    def create_checkout_session(self, session: AuthSession, price_id: str, origin: str) -> str:
        """Start a subscription checkout and return the hosted page URL"""
        try:
            price = self.product_repo.get_price(price_id)
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"Price lookup failed for {price_id}: {e}")
            price = None
        if not price or not price.active:
            raise BillingServiceException("Unknown price")

        customer_id = self.create_or_retrieve_customer(session)
        params = {
            "mode": "subscription" if price.type == "recurring" else "payment",
            "customer": customer_id,
            "line_items": [{"price": price.id, "quantity": 1}],
            "allow_promotion_codes": True,
            "success_url": f"{origin}/subscription",
            "cancel_url": f"{origin}/",
        }
        if price.type == "recurring" and price.trial_period_days:
            params["subscription_data"] = {"trial_period_days": price.trial_period_days}
        try:
            checkout_session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Checkout session creation failed: {e}")
            raise BillingServiceException("Could not start checkout")
        logger.info(f"Created checkout session for user {session.user_id}, price {price_id}")
        return checkout_session["url"]
