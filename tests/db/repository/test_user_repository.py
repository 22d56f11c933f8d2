import pytest
from sqlalchemy.exc import MultipleResultsFound
from db.client import DataClient, PolicyViolation
from db.models.user import User, Customer
from db.repositories.user_repository import UserRepository, CustomerRepository


def test_get_current_user_sees_only_own_row(session, add_user):
    add_user("alice", full_name="Alice")
    add_user("bob", full_name="Bob")
    found = UserRepository(DataClient.for_user(session, "alice")).get_current_user()
    assert found.full_name == "Alice"


def test_get_current_user_anonymous(session, add_user):
    add_user("alice")
    assert UserRepository(DataClient.for_user(session, None)).get_current_user() is None


def test_get_current_user_service_client_sees_several(session, add_user):
    add_user("alice")
    add_user("bob")
    with pytest.raises(MultipleResultsFound):
        UserRepository(DataClient.for_service(session)).get_current_user()


def test_upsert_user_inserts_then_updates(session):
    repo = UserRepository(DataClient.for_user(session, "alice"))
    repo.upsert_user({"id": "alice", "full_name": "Alice"})
    repo.upsert_user({"id": "alice", "full_name": "Alice Liddell"})
    users = session.query(User).all()
    assert len(users) == 1
    assert users[0].full_name == "Alice Liddell"


def test_upsert_other_user_is_refused(session):
    repo = UserRepository(DataClient.for_user(session, "alice"))
    with pytest.raises(PolicyViolation):
        repo.upsert_user({"id": "bob", "full_name": "Bob"})
    assert session.query(User).count() == 0


def test_customers_are_private(session):
    session.add(Customer(id="alice", stripe_customer_id="cus_1"))
    session.commit()
    assert CustomerRepository(DataClient.for_user(session, "alice")).get_by_user_id("alice") is None
    found = CustomerRepository(DataClient.for_service(session)).get_by_stripe_customer_id("cus_1")
    assert found.id == "alice"


def test_create_customer_requires_service_client(session):
    with pytest.raises(PolicyViolation):
        CustomerRepository(DataClient.for_user(session, "alice")).create(
            Customer(id="alice", stripe_customer_id="cus_1")
        )
    CustomerRepository(DataClient.for_service(session)).create(
        Customer(id="alice", stripe_customer_id="cus_1")
    )
    assert session.query(Customer).count() == 1
