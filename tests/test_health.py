import pytest
import httpx
from httpx import AsyncClient
from fastapi import status

from catalog import __version__
from catalog.main import create_app


@pytest.mark.asyncio
async def test_health_endpoint(client):
    response = await client.get("/api/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "instrument-catalog"
    assert data["version"] == __version__
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_detailed_health_endpoint(client):
    response = await client.get("/api/health/detailed")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "healthy"
    assert data["service"] == "instrument-catalog"
    assert "uptime_seconds" in data


@pytest.mark.asyncio
async def test_detailed_health_without_database(settings):
    app = create_app(settings)
    async with AsyncClient(base_url="http://test", transport=httpx.ASGITransport(app=app)) as client:
        response = await client.get("/api/health/detailed")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "unhealthy"


@pytest.mark.asyncio
async def test_root_endpoint(client):
    response = await client.get("/")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["message"] == "Instrument Catalog API"
    assert data["version"] == __version__


@pytest.mark.asyncio
async def test_request_id_header(client):
    response = await client.get("/api/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Response-Time" in response.headers
