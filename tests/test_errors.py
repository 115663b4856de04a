import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from database import get_session
from main import app


@pytest.fixture
def failing_client():
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.pop(get_session, None)


def _raise_database_error():
    raise OperationalError("SELECT 1", {}, Exception("database is unavailable"))


def _raise_unexpected_error():
    raise RuntimeError("boom")


def test_database_errors_become_500(failing_client):
    app.dependency_overrides[get_session] = _raise_database_error

    response = failing_client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "Passw0rd"}
    )

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "data": None,
        "error": {"message": "Database error"},
    }


def test_unexpected_errors_become_500(failing_client):
    app.dependency_overrides[get_session] = _raise_unexpected_error

    response = failing_client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": "Passw0rd"}
    )

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "data": None,
        "error": {"message": "Internal server error"},
    }


def test_unknown_route_uses_error_envelope(failing_client):
    response = failing_client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"]["message"] == "Not Found"
