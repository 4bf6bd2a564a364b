"""
Shared fixtures: in-memory database, API client and expense builders.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tripledger.db.base import Base
from tripledger.db.session import get_db
from tripledger.main import app
from tripledger.models import Trip, TripParticipant


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """FastAPI test client bound to the in-memory database."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def trip(db):
    """A EUR trip with Alice, Bob and Charlie."""
    trip = Trip(name="Lisbon", base_currency="EUR")
    db.add(trip)
    db.flush()
    for user_id, name in (("alice", "Alice"), ("bob", "Bob"), ("charlie", "Charlie")):
        db.add(TripParticipant(trip_id=trip.id, user_id=user_id, display_name=name))
    db.commit()
    db.refresh(trip)
    return trip

