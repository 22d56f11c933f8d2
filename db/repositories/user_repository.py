from db.client import DataClient
from db.models.user import User, Customer


class UserRepository:
    def __init__(self, client: DataClient):
        self.client = client

    def get_current_user(self) -> User | None:
        """The profile row visible to the client's user; errors if it sees several"""
        return self.client.query(User).one_or_none()

    def upsert_user(self, update_data: dict) -> User:
        """Insert or update a profile row from identity provider data"""
        user = self.client.db.merge(User(**update_data))
        self.client.check_write(user)
        self.client.commit()
        self.client.db.refresh(user)
        return user


class CustomerRepository:
    def __init__(self, client: DataClient):
        self.client = client

    def get_by_user_id(self, user_id: str) -> Customer | None:
        return self.client.query(Customer).filter(Customer.id == user_id).first()

    def get_by_stripe_customer_id(self, stripe_customer_id: str) -> Customer | None:
        return (
            self.client.query(Customer)
            .filter(Customer.stripe_customer_id == stripe_customer_id)
            .first()
        )

    def create(self, customer: Customer) -> Customer:
        self.client.check_write(customer)
        self.client.db.add(customer)
        self.client.commit()
        self.client.db.refresh(customer)
        return customer
