from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from mediavault.api.fastapi import create_app
from mediavault.services import memory_services
from mediavault.storage.backends.memory import MemoryBackend


class UnreachableBackend(MemoryBackend):
    async def ping(self) -> bool:
        return False


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "ok"
    assert data["database"] == "memory"
    assert data["storage"] == "up"
    assert data["version"]


@pytest.mark.asyncio
async def test_health_reports_unreachable_storage(auth_settings):
    app = create_app(services=memory_services(auth_settings, storage=UnreachableBackend()))

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        resp = await client.get("/api/health")

    assert resp.status_code == 503
    body = resp.json()
    assert body["success"] is False
    assert body["errors"] == [{"field": "storage", "message": "unreachable", "value": None}]


@pytest.mark.asyncio
async def test_oversized_request_is_rejected(alice, client):
    resp = await client.post(
        "/api/files/upload",
        content=b"x" * (12 * 1024 * 1024),
        headers=alice["headers"],
    )
    assert resp.status_code == 413
    assert resp.json()["success"] is False
