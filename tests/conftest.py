import os
import sys
import tempfile
from datetime import timedelta
from decimal import Decimal

import pytest

# Settings are read at import time, so the environment has to be ready first
_db_dir = tempfile.mkdtemp(prefix="goaltracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["TZ"] = "UTC"
os.environ["LOG_LEVEL"] = "WARNING"

# Add the backend directory to sys.path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "goaltracker_backend")))

from fastapi.testclient import TestClient

from config.settings import get_today
from database import crud
from database.database import Base, SessionLocal, engine
from database import models  # noqa: F401  registers the tables
from main import app
from services.rate_limiter import clear_all_rate_limits

TEST_EMAIL = "user@example.com"
TEST_PASSWORD = "password123"


def future_date(days: int = 30) -> str:
    return (get_today() + timedelta(days=days)).isoformat()


@pytest.fixture(autouse=True)
def reset_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    clear_all_rate_limits()
    yield
    clear_all_rate_limits()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_client(client):
    """A client holding the auth cookies of a freshly registered user."""
    response = client.post("/api/auth/register", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
    assert response.status_code == 201
    client.user_id = response.json()["data"]["user"]["id"]
    return client


@pytest.fixture
def other_client():
    """A second, independent user."""
    other = TestClient(app)
    response = other.post("/api/auth/register", json={"email": "other@example.com", "password": TEST_PASSWORD})
    assert response.status_code == 201
    other.user_id = response.json()["data"]["user"]["id"]
    return other


@pytest.fixture
def make_goal(auth_client):
    def _make_goal(**overrides):
        payload = {"name": "Run 100 km", "target_value": "100", "deadline": future_date()}
        payload.update(overrides)
        response = auth_client.post("/api/goals", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]["goal"]
    return _make_goal


@pytest.fixture
def add_progress(auth_client):
    def _add_progress(goal_id, value="10", notes=None):
        payload = {"value": value}
        if notes is not None:
            payload["notes"] = notes
        response = auth_client.post(f"/api/goals/{goal_id}/progress", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]["progress"]
    return _add_progress


@pytest.fixture
def overdue_goal(db, auth_client):
    """An active goal whose deadline was yesterday, created directly in the database."""
    def _overdue_goal(target_value="100", progress_values=()):
        goal = crud.create_goal(
            db,
            auth_client.user_id,
            name="Overdue goal",
            target_value=Decimal(target_value),
            deadline=get_today() - timedelta(days=1),
        )
        for value in progress_values:
            crud.create_progress_entry(db, goal.id, Decimal(value))
        return goal.id
    return _overdue_goal
