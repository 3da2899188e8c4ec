from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from mediavault.exceptions import ConflictError, UpstreamError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def translate_errors(collection: str) -> AsyncIterator[None]:
    """Map driver failures onto the service error taxonomy."""
    try:
        yield
    except DuplicateKeyError as exc:
        raise ConflictError("Resource already exists") from exc
    except PyMongoError as exc:
        logger.error("MongoDB operation on %s failed: %s", collection, exc)
        raise UpstreamError("Metadata store unavailable") from exc


class NoSqlRepository:
    """Thin async helper over one Motor collection.

    Documents go in and come out as plain dicts keyed by ``_id``; domain
    repositories convert them to models. Every driver error leaves this
    class as :class:`ConflictError` or :class:`UpstreamError`.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection
        self.name = collection.name

    async def get(self, where: dict[str, Any]) -> Optional[dict[str, Any]]:
        async with translate_errors(self.name):
            return await self.collection.find_one(where)

    async def list(
        self,
        where: dict[str, Any],
        *,
        sort: Optional[list[tuple[str, int]]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        async with translate_errors(self.name):
            cursor = self.collection.find(where)
            if sort:
                cursor = cursor.sort(sort)
            if offset:
                cursor = cursor.skip(offset)
            if limit:
                cursor = cursor.limit(limit)
            return await cursor.to_list(length=limit)

    async def count(self, where: dict[str, Any]) -> int:
        async with translate_errors(self.name):
            return int(await self.collection.count_documents(where))

    async def insert(self, doc: dict[str, Any]) -> dict[str, Any]:
        async with translate_errors(self.name):
            await self.collection.insert_one(doc)
        return doc

    async def update(self, where: dict[str, Any], update: Any) -> Optional[dict[str, Any]]:
        """Apply ``update`` (operator doc or pipeline) and return the new document."""
        async with translate_errors(self.name):
            return await self.collection.find_one_and_update(
                where, update, return_document=ReturnDocument.AFTER
            )

    async def delete(self, where: dict[str, Any]) -> bool:
        async with translate_errors(self.name):
            result = await self.collection.delete_one(where)
        return result.deleted_count > 0

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        async with translate_errors(self.name):
            return await self.collection.aggregate(pipeline).to_list(length=None)
