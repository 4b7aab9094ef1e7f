import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from src.api.routes import health_check


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_readyz_with_reachable_store(client: AsyncClient, engine, monkeypatch):
    monkeypatch.setattr(health_check, "engine", engine)

    response = await client.get("/readyz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "checks": {"db": "ok"}}


@pytest.mark.asyncio
async def test_readyz_with_unreachable_store(client: AsyncClient, tmp_path, monkeypatch):
    broken = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
    monkeypatch.setattr(health_check, "engine", broken)

    response = await client.get("/readyz")

    assert response.status_code == 503
    assert response.json()["checks"]["db"] == "error"
    await broken.dispose()
