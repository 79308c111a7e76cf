"""Pytest fixtures for backend tests."""

import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("DATABASE_SSL", "false")

from typing import Any, Callable, Generator, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

import donation_api.models  # noqa: F401
from donation_api.config import settings
from donation_api.core.exceptions import GeocodeError
from donation_api.core.gateway import PersistenceGateway
from donation_api.core.geocoding import Coordinates
from donation_api.core.security import hash_password, issue_token
from donation_api.database import Base, create_db_engine, create_session_factory
from donation_api.main import create_app

SPRINGFIELD = Coordinates(lat=39.7817, lng=-89.6501)


class FakeGeocoder:
    """Stands in for GeocodeClient and records every lookup."""

    def __init__(self, coordinates: Coordinates = SPRINGFIELD) -> None:
        self.coordinates = coordinates
        self.calls: list[tuple[Any, ...]] = []
        self.error: Optional[GeocodeError] = None

    async def resolve(self, address, city, state, zip) -> Coordinates:
        self.calls.append((address, city, state, zip))
        if self.error is not None:
            raise self.error
        return self.coordinates

    async def aclose(self) -> None:
        return None


@pytest.fixture(scope="function")
def test_db_engine() -> Generator[Engine, None, None]:
    """Create an in-memory SQLite engine with all tables."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def gateway(test_db_engine: Engine) -> PersistenceGateway:
    """Persistence gateway bound to the test database."""
    return PersistenceGateway(create_session_factory(test_db_engine))


@pytest.fixture(scope="function")
def geocoder() -> FakeGeocoder:
    """Geocoder that always resolves to Springfield, IL."""
    return FakeGeocoder()


@pytest.fixture(scope="function")
def test_app(gateway: PersistenceGateway, geocoder: FakeGeocoder) -> FastAPI:
    """Application wired to the test gateway and fake geocoder."""
    return create_app(settings=settings, gateway=gateway, geocoder=geocoder)


@pytest.fixture(scope="function")
def test_client(test_app: FastAPI) -> Generator[TestClient, None, None]:
    """Create a test client for the wired application."""
    client = TestClient(test_app)
    try:
        yield client
    finally:
        client.close()


@pytest.fixture(scope="function")
def create_user(gateway: PersistenceGateway) -> Callable:
    """Factory function to create users directly in the database.

    Returns:
        Function that creates a user with given parameters and returns (user, token)

    Example:
        ```python
        def test_example(create_user):
            user, token = create_user(email="donor@example.com", role="donor")
            assert user["email"] == "donor@example.com"
        ```
    """

    def _create_user(
        email: str,
        password: str = "testpassword123",
        role: str = "donor",
        **fields: Any,
    ) -> tuple[dict[str, Any], str]:
        """Create a user and return the stored record with a bearer token."""
        defaults = {
            "first_name": "Test",
            "last_name": "User",
            "address": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip": 62701,
            "lat": SPRINGFIELD.lat,
            "lng": SPRINGFIELD.lng,
        }
        defaults.update(fields)
        user = gateway.users.create(
            {"email": email, "password": hash_password(password), "role": role, **defaults}
        )
        token = issue_token(user, settings.jwt_secret, ttl_seconds=settings.token_ttl_seconds)
        return user, token

    return _create_user


@pytest.fixture(scope="function")
def create_donation(gateway: PersistenceGateway) -> Callable:
    """Factory function to create donations directly in the database."""

    def _create_donation(donor: int, **fields: Any) -> dict[str, Any]:
        defaults = {
            "category": "produce",
            "details": "Two crates of apples",
            "amount": 20,
            "pickup_address": "1 Main St, Springfield, IL, 62701",
            "recipient": 0,
        }
        defaults.update(fields)
        return gateway.donations.create({"donor": donor, **defaults})

    return _create_donation
