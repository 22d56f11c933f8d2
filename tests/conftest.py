"""
Shared test configuration and fixtures
"""
import pytest
import os
import jwt
from datetime import datetime, timedelta, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["AUTH_URL"] = "https://auth.example.test"
os.environ["AUTH_ANON_KEY"] = "anon-key"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"
os.environ["PIPELINE_API_KEY"] = "pipeline-key"

from main import app
from db.base import Base
from db.client import DataClient
from db.models import User, Job

# Create test database engine; one shared connection so every session sees the same data
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for tests"""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_access_token(user_id: str, email: str = "user@example.com", expires_in: int = 3600) -> str:
    """An access token shaped like the identity provider's"""
    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, os.environ["JWT_SECRET"], algorithm="HS256")


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session(test_db):
    sess = TestSessionLocal()
    yield sess
    sess.close()


@pytest.fixture
def service_client(session) -> DataClient:
    return DataClient.for_service(session)


@pytest.fixture
def add_user(session):
    def _add_user(user_id: str, full_name: str = None) -> User:
        user = User(id=user_id, full_name=full_name)
        session.add(user)
        session.commit()
        return user

    return _add_user


@pytest.fixture
def add_job(session):
    def _add_job(user_id: str, **fields) -> Job:
        job = Job(user_id=user_id, **fields)
        session.add(job)
        session.commit()
        return job

    return _add_job


@pytest.fixture
def client(test_db):
    """Create a test client with overridden database"""
    from api.dependencies import get_db, get_service_db
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_service_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, add_user):
    """Test client signed in as user-1"""
    add_user("user-1", full_name="Test User")
    client.cookies.set("access_token", make_access_token("user-1"))
    return client


@pytest.fixture
def make_token():
    return make_access_token
