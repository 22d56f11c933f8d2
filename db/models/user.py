from sqlalchemy import Column, String, JSON
from db.base import Base


class User(Base):
    __tablename__ = "users"
    __owner__ = "id"
    id = Column(String, primary_key=True)  # Identity provider user id
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    billing_address = Column(JSON, nullable=True)
    payment_method = Column(JSON, nullable=True)


class Customer(Base):
    """Maps a user to their Stripe customer. Only the service client can see it."""

    __tablename__ = "customers"
    id = Column(String, primary_key=True)
    stripe_customer_id = Column(String, unique=True, nullable=True)
