"""Unit tests for MemoryBackend and the object id helpers."""

import pytest

from mediavault.storage.backends import MemoryBackend, S3Backend
from mediavault.storage.base import (
    DeleteOutcome,
    ResourceType,
    build_object_id,
    guess_format,
    resolve_resource_type,
)
from mediavault.storage.easy import easy_storage
from mediavault.storage.settings import StorageSettings


@pytest.mark.storage
@pytest.mark.asyncio
class TestMemoryBackend:
    @pytest.fixture
    def backend(self):
        return MemoryBackend()

    async def test_put_returns_stored_object(self, backend):
        stored = await backend.put(
            "media/1-cat", b"meow", "image/png", resource_type=ResourceType.IMAGE, filename="cat.png"
        )

        assert stored.object_id == "media/1-cat"
        assert stored.resource_type == ResourceType.IMAGE
        assert stored.size == 4
        assert stored.format == "png"
        assert stored.url == "memory://image/media/1-cat"
        assert await backend.get("media/1-cat", ResourceType.IMAGE) == b"meow"

    async def test_resource_types_are_separate_namespaces(self, backend):
        await backend.put("media/1-x", b"a", "image/png", resource_type=ResourceType.IMAGE)

        assert await backend.exists("media/1-x", ResourceType.IMAGE)
        assert not await backend.exists("media/1-x", ResourceType.RAW)
        assert await backend.delete("media/1-x", ResourceType.RAW) == DeleteOutcome.NOT_FOUND
        assert len(backend) == 1

    async def test_delete(self, backend):
        await backend.put("media/1-x", b"a", "video/mp4", resource_type=ResourceType.VIDEO)

        assert await backend.delete("media/1-x", ResourceType.VIDEO) == DeleteOutcome.OK
        assert await backend.delete("media/1-x", ResourceType.VIDEO) == DeleteOutcome.NOT_FOUND
        assert len(backend) == 0

    async def test_ping(self, backend):
        assert await backend.ping() is True


@pytest.mark.parametrize(
    "mime, expected",
    [
        ("image/jpeg", ResourceType.IMAGE),
        ("video/mp4", ResourceType.VIDEO),
        ("audio/wav", ResourceType.VIDEO),
        ("application/pdf", ResourceType.RAW),
        ("text/plain", ResourceType.RAW),
        (None, ResourceType.RAW),
    ],
)
def test_resolve_resource_type(mime, expected):
    assert resolve_resource_type(mime) == expected


def test_build_object_id():
    assert build_object_id(
        "multimedia-app", "My Holiday (1).JPG", now_ms=1700000000000, unique="a1b2c3d4"
    ) == "multimedia-app/1700000000000-a1b2c3d4-My_Holiday_1.jpg"


def test_build_object_id_without_folder_or_stem():
    assert build_object_id("", "@@@.png", now_ms=5, unique="x") == "5-x-file.png"
    assert build_object_id("/media/", "", now_ms=5, unique="x") == "media/5-x-file"


def test_build_object_id_keeps_extension_and_is_unique_per_call():
    first = build_object_id("media", "report.pdf", now_ms=1717243200000)
    second = build_object_id("media", "report.txt", now_ms=1717243200000)
    third = build_object_id("media", "report.pdf", now_ms=1717243200000)

    assert first.endswith("-report.pdf")
    assert second.endswith("-report.txt")
    assert len({first, second, third}) == 3


def test_guess_format():
    assert guess_format("clip.MOV", "video/quicktime") == "mov"
    assert guess_format("noext", "application/pdf") == "pdf"
    assert guess_format(None, None) is None


@pytest.mark.storage
class TestEasyStorage:
    def test_memory_backend(self):
        backend = easy_storage(backend="memory", settings=StorageSettings())
        assert isinstance(backend, MemoryBackend)

    def test_s3_backend_from_settings(self):
        settings = StorageSettings(
            backend="s3",
            s3_bucket="media",
            s3_region="eu-west-1",
            s3_secret_key="secret",
            public_base_url="https://cdn.example.com",
        )

        backend = easy_storage(settings=settings)

        assert isinstance(backend, S3Backend)
        assert backend.bucket == "media"
        assert backend.region == "eu-west-1"
        assert backend.url_for("image/a") == "https://cdn.example.com/image/a"

    def test_explicit_kwargs_override_settings(self):
        backend = easy_storage(backend="s3", settings=StorageSettings(), bucket="other", region="us-west-2")
        assert backend.bucket == "other"
        assert backend.region == "us-west-2"

    def test_s3_requires_bucket(self):
        with pytest.raises(ValueError, match="STORAGE_S3_BUCKET"):
            easy_storage(backend="s3", settings=StorageSettings())

    def test_invalid_backend_type(self):
        with pytest.raises(ValueError):
            easy_storage(backend="floppy", settings=StorageSettings())
