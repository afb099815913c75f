"""Shared test fixtures and configuration."""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from apollusia.main import app
from apollusia.db.base import Base
from apollusia.api.deps import get_db
from apollusia.services.notifications import NotificationQueue
from tests.utils import event_payload


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    from apollusia.core.rate_limit import limiter

    # Check if this is a rate limiting test (marked with @pytest.mark.rate_limit)
    if "rate_limit" in request.keywords:
        limiter.reset()
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True

@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with a test database."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

@pytest.fixture
def notifications():
    """A queue that records submissions instead of running them."""
    return Mock(spec=NotificationQueue)

@pytest.fixture
def poll(client):
    """A poll created through the API; includes its admin token."""
    response = client.post(
        "/api/v1/polls",
        json={
            "title": "Team Dinner",
            "description": "Pick an evening",
            "location": "Pizzeria",
            "time_zone": "Europe/Berlin",
            "admin_mail": "admin@example.com",
        },
    )
    assert response.status_code == 200
    return response.json()

@pytest.fixture
def admin_headers(poll):
    return {"Authorization": f"Bearer {poll['admin_token']}"}

@pytest.fixture
def poll_events(client, poll, admin_headers):
    """Three events on the fixture poll."""
    response = client.post(
        f"/api/v1/polls/{poll['id']}/events",
        json=[event_payload(0), event_payload(24), event_payload(48, note="Backup")],
        headers=admin_headers,
    )
    assert response.status_code == 200
    return response.json()
