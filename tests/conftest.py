"""
Pytest fixtures for the JobTracker API tests.

Every test gets a fresh app built by create_app() over a temporary SQLite
file, with rate limiting off and cheap bcrypt rounds.
"""
import pytest
from fastapi.testclient import TestClient

from jobtracker.config import AuthSettings, LinkedInSettings, Settings
from jobtracker.main import create_app

PASSWORD = "secret123"


def make_settings(tmp_path, strategy="bearer", **overrides):
    """Build isolated settings for a test app."""
    values = {
        "database_url": f"sqlite:///{tmp_path / 'jobtracker-test.db'}",
        "rate_limit_enabled": False,
        "auth": AuthSettings(
            auth_strategy=strategy,
            secret_key="test-secret-key-1234",
            bcrypt_rounds=4,
        ),
        "linkedin": LinkedInSettings(
            linkedin_client_id=None,
            linkedin_client_secret=None,
            linkedin_api_base_url="https://api.linkedin.test/v2",
        ),
    }
    values.update(overrides)
    return Settings(**values)


def register(client, email, password=PASSWORD, name="Test User"):
    """Register a user and return the response."""
    return client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name},
    )


def bearer_headers(client, email, password=PASSWORD, name="Test User"):
    """Register a user under the bearer strategy and return auth headers."""
    response = register(client, email, password, name)
    assert response.status_code == 201, response.text
    token = response.json()["token"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app(tmp_path):
    """App using the bearer token strategy."""
    return create_app(make_settings(tmp_path, "bearer"))


@pytest.fixture
def client(app):
    """FastAPI test client fixture (runs startup so tables exist)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_app(tmp_path):
    """App using the server-side session strategy."""
    return create_app(make_settings(tmp_path, "session"))


@pytest.fixture
def session_client(session_app):
    with TestClient(session_app) as test_client:
        yield test_client


@pytest.fixture
def alice(client):
    """Authentication headers for a first user."""
    return bearer_headers(client, "alice@example.com", name="Alice")


@pytest.fixture
def bob(client):
    """Authentication headers for a second user."""
    return bearer_headers(client, "bob@example.com", name="Bob")
