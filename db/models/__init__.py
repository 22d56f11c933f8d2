from .user import User, Customer
from .product import Product, Price
from .subscription import Subscription
from .job import Job

__all__ = ["User", "Customer", "Product", "Price", "Subscription", "Job"]
