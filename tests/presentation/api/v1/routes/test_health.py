"""Service info and health endpoints"""

import pytest
from sqlalchemy.exc import OperationalError

from scoped_rbac.infrastructure.persistence.database import get_db


class _BrokenSession:
    async def execute(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.mark.asyncio
async def test_health_reports_database(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "checks": {"api": True, "database": True}}


@pytest.mark.asyncio
async def test_health_unavailable_without_database(client):
    from main import app

    async def broken_db():
        yield _BrokenSession()

    app.dependency_overrides[get_db] = broken_db

    response = await client.get("/health")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["checks"]["database"] is False


@pytest.mark.asyncio
async def test_root_identifies_service(client):
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Scoped RBAC"
    assert data["status"] == "running"
