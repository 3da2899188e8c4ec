"""
Root conftest.py for mediavault tests.

Fixtures are organized by category:
- Clock and record factories (search, lifecycle)
- Service fixtures (in-memory repositories and object store)
- API fixtures (FastAPI app, client, authenticated user)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from mediavault.api.fastapi import create_app
from mediavault.auth.settings import AuthSettings
from mediavault.files.keywords import derive_search_keywords
from mediavault.files.models import FileRecord
from mediavault.services import memory_services
from mediavault.storage.backends.memory import MemoryBackend

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
TEST_JWT_SECRET = "mediavault-test-secret-0123456789abcdef"
STRONG_PASSWORD = "Secret123"


# =============================================================================
# CLOCK AND RECORD FACTORIES
# =============================================================================


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


def build_record(**overrides: Any) -> FileRecord:
    """A valid file record; ``age_days`` sets created_at relative to NOW."""
    age_days = overrides.pop("age_days", 365)
    created = overrides.pop("created_at", NOW - timedelta(days=age_days))
    data: dict[str, Any] = {
        "id": str(ObjectId()),
        "title": "Untitled",
        "description": None,
        "original_name": "file.jpg",
        "storage_object_id": "multimedia-app/1-file",
        "storage_resource_type": "image",
        "url": "memory://image/multimedia-app/1-file",
        "secure_url": "memory://image/multimedia-app/1-file",
        "file_type": "image",
        "mime_type": "image/jpeg",
        "size": 100,
        "tags": [],
        "category": "other",
        "is_public": False,
        "view_count": 0,
        "download_count": 0,
        "owner_id": "owner-a",
        "created_at": created,
        "updated_at": created,
    }
    data.update(overrides)
    record = FileRecord.model_validate(data)
    if "search_keywords" not in overrides:
        record.search_keywords = derive_search_keywords(
            title=record.title,
            description=record.description,
            tags=record.tags,
            original_name=record.original_name,
            file_type=record.file_type,
            category=record.category,
        )
    return record


@pytest.fixture
def make_record():
    return build_record


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(jwt_secret=TEST_JWT_SECRET)


@pytest.fixture
def storage() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def services(auth_settings, storage):
    return memory_services(auth_settings, storage=storage)


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def app(services):
    return create_app(services=services)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


async def register(client: AsyncClient, email: str, name: str = "Test User") -> dict[str, Any]:
    resp = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": STRONG_PASSWORD},
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return {"user": data["user"], "headers": {"Authorization": f"Bearer {data['token']}"}}


@pytest_asyncio.fixture
async def alice(client) -> dict[str, Any]:
    return await register(client, "alice@example.com", "Alice")


@pytest_asyncio.fixture
async def bob(client) -> dict[str, Any]:
    return await register(client, "bob@example.com", "Bob")


@pytest.fixture
def register_user(client):
    async def _register(email: str, name: str = "Test User") -> dict[str, Any]:
        return await register(client, email, name)

    return _register
