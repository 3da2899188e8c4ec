from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from mediavault.db.nosql import NoSqlRepository, translate_errors

from .models import FileRecord

FILES_COLLECTION = "files"

# fields a free-text query is matched against
TEXT_FIELDS = ("title", "description", "original_name", "tags", "search_keywords")


@dataclass(frozen=True)
class FileFilter:
    """Owner scoped predicate over file records.

    ``text`` (already trimmed) restricts to records containing it, case
    insensitively, in any of :data:`TEXT_FIELDS`.
    """

    owner_id: str
    file_type: Optional[str] = None
    category: Optional[str] = None
    text: Optional[str] = None

    def to_mongo(self) -> dict[str, Any]:
        where: dict[str, Any] = {"owner_id": self.owner_id}
        if self.file_type:
            where["file_type"] = str(self.file_type)
        if self.category:
            where["category"] = str(self.category)
        if self.text:
            pattern = {"$regex": re.escape(self.text), "$options": "i"}
            where["$or"] = [{f: pattern} for f in TEXT_FIELDS]
        return where

    def matches(self, record: FileRecord) -> bool:
        if record.owner_id != self.owner_id:
            return False
        if self.file_type and record.file_type != self.file_type:
            return False
        if self.category and record.category != self.category:
            return False
        if self.text:
            needle = self.text.lower()
            haystack = [record.title, record.description or "", record.original_name]
            haystack.extend(record.tags)
            haystack.extend(record.search_keywords)
            return any(needle in value.lower() for value in haystack)
        return True


class FileRepository(ABC):
    """Persistent metadata store for file records."""

    @abstractmethod
    async def insert(self, record: FileRecord) -> FileRecord: ...

    @abstractmethod
    async def get(self, file_id: str) -> Optional[FileRecord]: ...

    @abstractmethod
    async def update(self, file_id: str, owner_id: str, fields: dict[str, Any]) -> Optional[FileRecord]:
        """Set ``fields`` on the owner's record; None if it does not exist."""

    @abstractmethod
    async def delete(self, file_id: str, owner_id: str) -> bool: ...

    @abstractmethod
    async def increment(self, file_id: str, viewer_id: str, field: str) -> Optional[int]:
        """Atomically bump ``field`` on a record visible to ``viewer_id``; return the new value."""

    @abstractmethod
    async def count(self, where: FileFilter) -> int: ...

    @abstractmethod
    async def list_sorted(
        self, where: FileFilter, *, sort_field: str, descending: bool, offset: int, limit: int
    ) -> list[FileRecord]:
        """One page ordered by ``sort_field`` then store order, same direction."""

    @abstractmethod
    async def candidates(self, where: FileFilter, *, limit: Optional[int] = None) -> list[FileRecord]:
        """Every matching record in store order, optionally capped at ``limit``."""

    @abstractmethod
    async def stats_by_type(self, owner_id: str) -> list[dict[str, Any]]:
        """``[{type, count, total_size, total_views}]`` for the owner's records."""

    async def ensure_indexes(self) -> None:
        return None


class MongoFileRepository(FileRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = NoSqlRepository(db[FILES_COLLECTION])

    async def ensure_indexes(self) -> None:
        async with translate_errors(self.repo.name):
            coll = self.repo.collection
            await coll.create_index([("owner_id", ASCENDING), ("created_at", DESCENDING)])
            await coll.create_index([("owner_id", ASCENDING), ("file_type", ASCENDING)])
            await coll.create_index([("owner_id", ASCENDING), ("category", ASCENDING)])
            await coll.create_index([("tags", ASCENDING)])
            await coll.create_index([("is_public", ASCENDING)])

    async def insert(self, record: FileRecord) -> FileRecord:
        await self.repo.insert(record.to_document())
        return record

    async def get(self, file_id: str) -> Optional[FileRecord]:
        doc = await self.repo.get({"_id": file_id})
        return FileRecord.from_document(doc) if doc else None

    async def update(self, file_id, owner_id, fields):
        doc = await self.repo.update({"_id": file_id, "owner_id": owner_id}, {"$set": fields})
        return FileRecord.from_document(doc) if doc else None

    async def delete(self, file_id, owner_id):
        return await self.repo.delete({"_id": file_id, "owner_id": owner_id})

    async def increment(self, file_id, viewer_id, field):
        doc = await self.repo.update(
            {"_id": file_id, "$or": [{"owner_id": viewer_id}, {"is_public": True}]},
            {"$inc": {field: 1}},
        )
        return int(doc[field]) if doc else None

    async def count(self, where):
        return await self.repo.count(where.to_mongo())

    async def list_sorted(self, where, *, sort_field, descending, offset, limit):
        direction = DESCENDING if descending else ASCENDING
        docs = await self.repo.list(
            where.to_mongo(),
            sort=[(sort_field, direction), ("_id", direction)],
            offset=offset,
            limit=limit,
        )
        return [FileRecord.from_document(d) for d in docs]

    async def candidates(self, where, *, limit=None):
        docs = await self.repo.list(where.to_mongo(), sort=[("_id", ASCENDING)], limit=limit)
        return [FileRecord.from_document(d) for d in docs]

    async def stats_by_type(self, owner_id):
        rows = await self.repo.aggregate(
            [
                {"$match": {"owner_id": owner_id}},
                {
                    "$group": {
                        "_id": "$file_type",
                        "count": {"$sum": 1},
                        "total_size": {"$sum": "$size"},
                        "total_views": {"$sum": "$view_count"},
                    }
                },
                {"$sort": {"_id": 1}},
            ]
        )
        return [
            {
                "type": row["_id"],
                "count": int(row["count"]),
                "total_size": int(row["total_size"]),
                "total_views": int(row["total_views"]),
            }
            for row in rows
        ]
