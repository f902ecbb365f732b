"""Shared fixtures for API tests."""

from __future__ import annotations

import httpx
import pytest

from turbcast.api.app import app
from turbcast.api.deps import get_forecast_service
from turbcast.services.cache import ForecastCache
from turbcast.services.forecast_service import ForecastService
from turbcast.services.route.resolver import RouteResolver
from tests.services.fakes import FakeClock, FakePirepClient, FakeProvider, make_route


@pytest.fixture
def provider():
    return FakeProvider("primary", route=make_route())


@pytest.fixture
def forecast_service(provider):
    """Forecast service wired to fakes; no network."""
    return ForecastService(
        resolver=RouteResolver([provider]),
        pireps=FakePirepClient(),
        cache=ForecastCache(clock=FakeClock()),
    )


@pytest.fixture
def test_app(forecast_service):
    """FastAPI app with dependency overrides for testing."""
    app.dependency_overrides[get_forecast_service] = lambda: forecast_service
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    """httpx AsyncClient wired to the test app."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
