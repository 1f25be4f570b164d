from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from blog_service.database import get_db
from blog_service.main import app


def test_status(client):
    response = client.get("/status")
    assert response.status_code == 200
    assert response.json() == {"status": "Blog service instance 1 is running"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


def test_health_database_down():
    db = MagicMock()
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    app.dependency_overrides[get_db] = lambda: db
    try:
        response = TestClient(app).get("/health")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 503
    assert response.json()["database"] == "unavailable"


def test_database_error_is_reported_as_500():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
    app.dependency_overrides[get_db] = lambda: db
    try:
        response = TestClient(app).get("/api/users")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_metrics_exposed(client):
    client.get("/status")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_request" in response.text
