"""Health endpoint tests."""

from httpx import AsyncClient

from estatehub.context import AppContext
from estatehub.services.token_store import UnavailableTokenStore


async def test_health_check(client: AsyncClient):
    response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_health_check_db(client: AsyncClient):
    response = await client.get("/api/health/db")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


async def test_health_check_cache(client: AsyncClient):
    response = await client.get("/api/health/cache")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "cache": "connected", "rate_limiting": True}


async def test_readiness_with_cache_down(client: AsyncClient, ctx: AppContext):
    ctx.token_store = UnavailableTokenStore()

    response = await client.get("/api/health/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "connected"
    assert data["cache"] == "disconnected"


async def test_request_id_echoed(client: AsyncClient):
    response = await client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
