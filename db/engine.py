from functools import lru_cache
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from db.base import Base
from db.models import User, Customer, Product, Price, Subscription, Job  # noqa: F401
import logging
import os

logger = logging.getLogger(__name__)

# Session-scoped connection. Rows it returns are further restricted per user
# by db.client.DataClient.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/app.db")


def _connect_args(url: str) -> dict:
    # Use check_same_thread only for SQLite
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


# Create data directory if it doesn't exist
if DATABASE_URL.startswith("sqlite:///"):
    db_path = DATABASE_URL.replace("sqlite:///", "")
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        os.makedirs(db_dir, exist_ok=True)

engine = create_engine(DATABASE_URL, connect_args=_connect_args(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create tables
Base.metadata.create_all(engine)
logger.info(f"Tables created: {list(Base.metadata.tables.keys())}")


@lru_cache()
def get_service_sessionmaker() -> sessionmaker:
    """Privileged connection, built on first use.

    SERVICE_DATABASE_URL should point at a role that is not subject to the
    row-level policy. Without it the session-scoped database is reused.
    """
    url = os.getenv("SERVICE_DATABASE_URL") or DATABASE_URL
    if url == DATABASE_URL:
        return SessionLocal
    service_engine = create_engine(url, connect_args=_connect_args(url))
    logger.info("Service database engine created")
    return sessionmaker(autocommit=False, autoflush=False, bind=service_engine)
