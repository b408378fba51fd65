"""
Tests for the shared error handlers and the system endpoints.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from jobtracker.main import create_app

from .conftest import make_settings


def build_app(tmp_path, environment):
    app = create_app(make_settings(tmp_path, environment=environment))

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    @app.get("/db-down")
    async def db_down():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    return app


@pytest.fixture
def prod_client(tmp_path):
    with TestClient(build_app(tmp_path, "production"), raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def dev_client(tmp_path):
    with TestClient(build_app(tmp_path, "development"), raise_server_exceptions=False) as test_client:
        yield test_client


class TestUnhandledErrors:

    def test_production_hides_details(self, prod_client):
        response = prod_client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "message": "Something went wrong"}

    def test_development_includes_details(self, dev_client):
        response = dev_client.get("/boom")

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "kaboom"
        assert any("RuntimeError" in line for line in data["stack"])


class TestDatabaseErrors:

    def test_database_error_is_400(self, prod_client):
        response = prod_client.get("/db-down")

        assert response.status_code == 400
        assert response.json()["error"] == "Database error"
        assert "details" not in response.json()

    def test_development_includes_database_details(self, dev_client):
        response = dev_client.get("/db-down")

        assert "database is locked" in response.json()["details"]


class TestSystemRoutes:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_unknown_route_is_404_json(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "HTTP error"

    def test_security_headers(self, client):
        response = client.get("/api/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_pages_render(self, client):
        assert "text/html" in client.get("/").headers["content-type"]
        assert "text/html" in client.get("/login").headers["content-type"]
