from db.client import DataClient
from db.models.subscription import Subscription, ACTIVE_STATUSES


class SubscriptionRepository:
    def __init__(self, client: DataClient):
        self.client = client

    def get_current(self) -> Subscription | None:
        """
        The single trialing or active subscription visible to the client.
        Raises MultipleResultsFound when more than one matches.
        """
        return (
            self.client.query(Subscription)
            .filter(Subscription.status.in_(ACTIVE_STATUSES))
            .one_or_none()
        )

    def upsert(self, update_data: dict) -> Subscription:
        subscription = self.client.db.merge(Subscription(**update_data))
        self.client.check_write(subscription)
        self.client.commit()
        self.client.db.refresh(subscription)
        return subscription
