"""
Tests for the Motor-backed file and user repositories.

The collection is a Mock with AsyncMock driver methods, so these tests check
the filters and update documents that reach MongoDB rather than query results.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from mediavault.auth.models import User
from mediavault.auth.repository import MongoUserRepository
from mediavault.exceptions import ConflictError, UpstreamError
from mediavault.files.repository import FileFilter, MongoFileRepository

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def mock_cursor():
    cursor = Mock()
    cursor.sort = Mock(return_value=cursor)
    cursor.skip = Mock(return_value=cursor)
    cursor.limit = Mock(return_value=cursor)
    cursor.to_list = AsyncMock(return_value=[])
    return cursor


@pytest.fixture
def mock_collection(mock_cursor):
    collection = Mock()
    collection.name = "test_collection"
    collection.find_one = AsyncMock(return_value=None)
    collection.find = Mock(return_value=mock_cursor)
    collection.insert_one = AsyncMock()
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock(return_value=Mock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=0)
    collection.create_index = AsyncMock()
    collection.aggregate = Mock(return_value=mock_cursor)
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = Mock()
    db.__getitem__ = Mock(return_value=mock_collection)
    return db


def file_document(**overrides):
    doc = {
        "_id": "file-1",
        "title": "Holiday",
        "description": None,
        "original_name": "holiday.jpg",
        "storage_object_id": "multimedia-app/1-holiday",
        "storage_resource_type": "image",
        "url": "memory://image/multimedia-app/1-holiday",
        "secure_url": "memory://image/multimedia-app/1-holiday",
        "file_type": "image",
        "mime_type": "image/jpeg",
        "size": 10,
        "tags": [],
        "category": "other",
        "is_public": False,
        "view_count": 3,
        "download_count": 0,
        "owner_id": "owner-a",
        "search_keywords": ["holiday"],
        "created_at": CREATED,
        "updated_at": CREATED,
    }
    doc.update(overrides)
    return doc


class TestMongoFileRepository:
    @pytest.fixture
    def repo(self, mock_db):
        return MongoFileRepository(mock_db)

    @pytest.mark.asyncio
    async def test_get_converts_document(self, repo, mock_collection):
        mock_collection.find_one.return_value = file_document()

        record = await repo.get("file-1")

        assert record.id == "file-1"
        assert record.view_count == 3
        mock_collection.find_one.assert_awaited_once_with({"_id": "file-1"})

    @pytest.mark.asyncio
    async def test_update_is_owner_scoped(self, repo, mock_collection):
        mock_collection.find_one_and_update.return_value = file_document(title="Renamed")

        record = await repo.update("file-1", "owner-a", {"title": "Renamed"})

        assert record.title == "Renamed"
        mock_collection.find_one_and_update.assert_awaited_once_with(
            {"_id": "file-1", "owner_id": "owner-a"},
            {"$set": {"title": "Renamed"}},
            return_document=ReturnDocument.AFTER,
        )

    @pytest.mark.asyncio
    async def test_increment_requires_owner_or_public(self, repo, mock_collection):
        mock_collection.find_one_and_update.return_value = file_document(view_count=4)

        assert await repo.increment("file-1", "viewer", "view_count") == 4

        where, update = mock_collection.find_one_and_update.await_args.args
        assert where == {"_id": "file-1", "$or": [{"owner_id": "viewer"}, {"is_public": True}]}
        assert update == {"$inc": {"view_count": 1}}

    @pytest.mark.asyncio
    async def test_increment_on_hidden_file(self, repo):
        assert await repo.increment("file-1", "viewer", "view_count") is None

    @pytest.mark.asyncio
    async def test_delete_reports_missing(self, repo, mock_collection):
        mock_collection.delete_one.return_value = Mock(deleted_count=0)
        assert await repo.delete("file-1", "owner-a") is False

    @pytest.mark.asyncio
    async def test_list_sorted_breaks_ties_by_id(self, repo, mock_cursor):
        mock_cursor.to_list.return_value = [file_document()]

        rows = await repo.list_sorted(
            FileFilter(owner_id="owner-a"), sort_field="size", descending=True, offset=10, limit=5
        )

        assert [r.id for r in rows] == ["file-1"]
        mock_cursor.sort.assert_called_once_with([("size", DESCENDING), ("_id", DESCENDING)])
        mock_cursor.skip.assert_called_once_with(10)
        mock_cursor.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_candidates_in_store_order(self, repo, mock_collection, mock_cursor):
        await repo.candidates(FileFilter(owner_id="owner-a", text="a.b"), limit=100)

        where = mock_collection.find.call_args.args[0]
        assert where["owner_id"] == "owner-a"
        assert {"title": {"$regex": r"a\.b", "$options": "i"}} in where["$or"]
        mock_cursor.sort.assert_called_once_with([("_id", ASCENDING)])
        mock_cursor.limit.assert_called_once_with(100)

    @pytest.mark.asyncio
    async def test_stats_by_type(self, repo, mock_cursor):
        mock_cursor.to_list.return_value = [
            {"_id": "image", "count": 2, "total_size": 30, "total_views": 5},
        ]

        rows = await repo.stats_by_type("owner-a")

        assert rows == [{"type": "image", "count": 2, "total_size": 30, "total_views": 5}]

    @pytest.mark.asyncio
    async def test_driver_error_becomes_upstream_error(self, repo, mock_collection):
        mock_collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")
        with pytest.raises(UpstreamError):
            await repo.get("file-1")

    @pytest.mark.asyncio
    async def test_ensure_indexes(self, repo, mock_collection):
        await repo.ensure_indexes()
        assert mock_collection.create_index.await_count == 5


class TestMongoUserRepository:
    @pytest.fixture
    def repo(self, mock_db):
        return MongoUserRepository(mock_db)

    @pytest.mark.asyncio
    async def test_create_duplicate_email(self, repo, mock_collection):
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        user = User(id="u1", name="Ann", email="ann@example.com", created_at=CREATED)

        with pytest.raises(ConflictError) as exc_info:
            await repo.create(user)
        assert exc_info.value.message == "User already exists with this email"

    @pytest.mark.asyncio
    async def test_create_stores_password_hash(self, repo, mock_collection):
        user = User(id="u1", name="Ann", email="ann@example.com", password_hash="h", created_at=CREATED)

        await repo.create(user)

        doc = mock_collection.insert_one.await_args.args[0]
        assert doc["_id"] == "u1"
        assert doc["password_hash"] == "h"

    @pytest.mark.asyncio
    async def test_email_lookup_is_case_insensitive(self, repo, mock_collection):
        await repo.get_by_email("Ann@Example.COM")
        mock_collection.find_one.assert_awaited_once_with({"email": "ann@example.com"})

    @pytest.mark.asyncio
    async def test_adjust_usage_is_one_clamped_pipeline(self, repo, mock_collection):
        await repo.adjust_usage("u1", files=-1, size=-2048)

        where, pipeline = mock_collection.find_one_and_update.await_args.args
        assert where == {"_id": "u1"}
        assert pipeline == [
            {
                "$set": {
                    "total_files": {"$max": [0, {"$add": [{"$ifNull": ["$total_files", 0]}, -1]}]},
                    "storage_used": {
                        "$max": [0, {"$add": [{"$ifNull": ["$storage_used", 0]}, -2048]}]
                    },
                }
            }
        ]

    @pytest.mark.asyncio
    async def test_ensure_indexes_unique_email(self, repo, mock_collection):
        await repo.ensure_indexes()
        mock_collection.create_index.assert_awaited_once_with([("email", ASCENDING)], unique=True)
