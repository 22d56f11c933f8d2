from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from db.base import Base

# Subscription status constants
SUBSCRIPTION_TRIALING = "trialing"
SUBSCRIPTION_ACTIVE = "active"
SUBSCRIPTION_CANCELED = "canceled"
SUBSCRIPTION_INCOMPLETE = "incomplete"
SUBSCRIPTION_INCOMPLETE_EXPIRED = "incomplete_expired"
SUBSCRIPTION_PAST_DUE = "past_due"
SUBSCRIPTION_UNPAID = "unpaid"
SUBSCRIPTION_PAUSED = "paused"

ACTIVE_STATUSES = (SUBSCRIPTION_TRIALING, SUBSCRIPTION_ACTIVE)


class Subscription(Base):
    __tablename__ = "subscriptions"
    __owner__ = "user_id"
    id = Column(String, primary_key=True)  # Stripe subscription id
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    price_id = Column(String, ForeignKey("prices.id"), nullable=True)
    quantity = Column(Integer, nullable=True)
    cancel_at_period_end = Column(Boolean, default=False)
    created = Column(DateTime(timezone=True), nullable=True)
    current_period_start = Column(DateTime(timezone=True), nullable=True)
    current_period_end = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    cancel_at = Column(DateTime(timezone=True), nullable=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)
    trial_start = Column(DateTime(timezone=True), nullable=True)
    trial_end = Column(DateTime(timezone=True), nullable=True)

    price = relationship("Price")
