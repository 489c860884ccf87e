"""Tests for the health endpoint."""
from httpx import AsyncClient

from tests.helpers import AppState


async def test_health_all_healthy(client: AsyncClient) -> None:
    """Database and Redis reachable."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "healthy", "redis": "healthy"}


async def test_health_degraded_without_redis(client: AsyncClient, app_state: AppState) -> None:
    """A disconnected Redis degrades the status but the endpoint still answers."""
    app_state.redis.is_connected = False

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["redis"] == "unavailable"


async def test_security_headers_present(client: AsyncClient) -> None:
    """Every response carries the security headers."""
    response = await client.get("/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["Cache-Control"] == "no-store"
