from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from db.base import Base


class Product(Base):
    __tablename__ = "products"
    __public__ = True
    id = Column(String, primary_key=True)  # Stripe product id
    active = Column(Boolean, default=False)
    name = Column(String, nullable=True)
    description = Column(String, nullable=True)
    image = Column(String, nullable=True)
    # "index" orders products for display, "credits" is the per-period allotment
    metadata_ = Column("metadata", JSON, nullable=True)

    prices = relationship("Price", back_populates="product")


class Price(Base):
    __tablename__ = "prices"
    __public__ = True
    id = Column(String, primary_key=True)  # Stripe price id
    product_id = Column(String, ForeignKey("products.id"), nullable=True)
    active = Column(Boolean, default=False)
    description = Column(String, nullable=True)
    unit_amount = Column(Integer, nullable=True)  # Smallest currency unit
    currency = Column(String(3), nullable=True)
    type = Column(String, nullable=True)  # one_time or recurring
    interval = Column(String, nullable=True)
    interval_count = Column(Integer, nullable=True)
    trial_period_days = Column(Integer, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)

    product = relationship("Product", back_populates="prices")
