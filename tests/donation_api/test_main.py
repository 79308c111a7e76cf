"""Tests for the application factory."""

from fastapi.testclient import TestClient

from donation_api.config import settings
from donation_api.core.gateway import PersistenceGateway
from donation_api.core.geocoding import GeocodeClient
from donation_api.main import app, create_app


def test_health_endpoint(test_client: TestClient):
    """Test that the /health endpoint returns the correct response."""
    response = test_client.get("/health")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"status": "healthy", "service": "donation_match_backend"}


def test_module_app_builds_collaborators():
    """Test that the default app builds its own gateway and geocoder."""
    assert isinstance(app.state.gateway, PersistenceGateway)
    assert isinstance(app.state.geocoder, GeocodeClient)
    assert app.state.engine is not None


def test_create_app_uses_injected_collaborators(gateway, geocoder):
    """Test that injected collaborators replace the defaults."""
    built = create_app(settings=settings, gateway=gateway, geocoder=geocoder)

    assert built.state.gateway is gateway
    assert built.state.geocoder is geocoder
    assert built.state.engine is None


def test_cors_allows_configured_origin(test_client: TestClient):
    """Test that the configured frontend origin passes CORS."""
    response = test_client.get("/donations", headers={"Origin": settings.cors_origin})

    assert response.headers["access-control-allow-origin"] == settings.cors_origin


def test_cors_rejects_other_origin(test_client: TestClient):
    """Test that other origins get no CORS grant."""
    response = test_client.get("/donations", headers={"Origin": "http://evil.example"})

    assert "access-control-allow-origin" not in response.headers


def test_lifespan_creates_tables(tmp_path):
    """Test that startup verifies the database and creates tables when asked."""
    db_url = f"sqlite:///{tmp_path / 'startup.db'}"
    startup_settings = settings.model_copy(update={"database_url": db_url, "auto_migrate": True})
    startup_app = create_app(settings=startup_settings)

    with TestClient(startup_app) as client:
        assert client.get("/users").json() == []
