"""
Test configuration for the tierpoints loyalty engine.
"""
import os

os.environ.setdefault("SEED_DEMO_CUSTOMERS", "false")
os.environ.setdefault("CUSTOMER_STORE", "memory")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from tierpoints.core.config import Settings
from tierpoints.core.database import Base, make_engine
from tierpoints.core.loyalty_rules import LoyaltyRules, Tier
from tierpoints.main import create_app
from tierpoints.services.customer_store import CustomerRecord, InMemoryCustomerStore, SqlCustomerStore
from tierpoints.services.loyalty_engine import LoyaltyEngine


@pytest.fixture
def rules():
    """Reference rules: 1 point per 10, GOLD x1.2, PLATINUM x2, 500/750/1000."""
    return LoyaltyRules()


@pytest.fixture
def engine(rules):
    return LoyaltyEngine(rules)


@pytest.fixture
def memory_store():
    return InMemoryCustomerStore()


@pytest.fixture
def sql_store():
    """SQLAlchemy store on a private in-memory SQLite database."""
    import tierpoints.models  # noqa: F401

    db_engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=db_engine)
    factory = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)
    yield SqlCustomerStore(factory)
    db_engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Run store-level tests against both implementations."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def silver_customer(store):
    """John Smith: SILVER with 450 points."""
    return store.add(CustomerRecord(
        id=None,
        name="John Smith",
        tier=Tier.SILVER,
        points=450,
        join_date=date(2023, 6, 15),
        preferred_store="Downtown",
    ))


@pytest.fixture
def client(memory_store):
    s = Settings(SEED_DEMO_CUSTOMERS=True, CUSTOMER_STORE="memory", LOG_LEVEL="WARNING")
    app = create_app(s, store=memory_store)
    with TestClient(app) as c:
        yield c
