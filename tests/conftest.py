"""Pytest configuration and fixtures for Stock Tracker tests."""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from stock_tracker.models.base import Base
from stock_tracker.services.inventory_store import InventoryStore
from stock_tracker.services.persistence import InMemoryProductBackend, SqlAlchemyProductBackend
from stock_tracker.utils.config import reset_config


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the session factory to the test
    4. Drops all tables after the test completes
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def memory_store():
    """Store on top of the dictionary backend."""
    return InventoryStore(InMemoryProductBackend())


@pytest.fixture(scope="function", params=["memory", "sqlalchemy"])
def store(request):
    """Store on each available backend; tests using it run once per backend."""
    if request.param == "memory":
        return InventoryStore(InMemoryProductBackend())

    session_factory = request.getfixturevalue("test_db")
    return InventoryStore(SqlAlchemyProductBackend(session_factory))


@pytest.fixture(scope="function")
def stocked_store(store):
    """Store holding a bolt and a nut."""
    store.add("bolt", 10, Decimal("1.50"))
    store.add("nut", 0, Decimal("2.00"))
    return store


@pytest.fixture(autouse=True)
def clean_config():
    """Give every test a fresh configuration singleton."""
    reset_config()
    yield
    reset_config()
