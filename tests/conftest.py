"""Pytest configuration and fixtures."""

import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import freshtrack.services.realtime as realtime_module
from freshtrack.database import Base, engine_options, get_db, init_db
from freshtrack.main import app
from freshtrack.models.category import Category


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL when DATABASE_URL is set, SQLite otherwise
if os.getenv("DATABASE_URL"):
    # Sibling database on the same server
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").rsplit("/", 1)[0] + "/freshtrack_test"
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_options(SQLALCHEMY_DATABASE_URL))
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    init_db(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch):
    """Replace the pub/sub client so stored notifications publish to a mock."""
    client = MagicMock()
    monkeypatch.setattr(realtime_module, "_sync_redis", client)
    return client


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email: str, name: str = "Test User") -> AuthHeaders:
    """Register a user and return auth headers with user info."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": "testpass123", "name": name},
    )
    assert response.status_code == 201
    data = response.json()
    return AuthHeaders(
        {"Authorization": f"Bearer {data['access_token']}"},
        user_id=data["user"]["id"],
        email=email,
    )


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    return register(client, "test@example.com")


@pytest.fixture
def other_auth_headers(client):
    """A second user, for ownership checks."""
    return register(client, "other@example.com", name="Other User")


@pytest.fixture
def category(db):
    """A category to file items under."""
    category = Category(name="Dairy", icon="🥛", color="#2196F3", sort_order=3)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category
