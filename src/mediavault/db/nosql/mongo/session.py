from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ..settings import MongoSettings, get_mongo_settings

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None


async def initialize_mongo(settings: Optional[MongoSettings] = None) -> AsyncIOMotorDatabase:
    """Create the process-wide client and return the configured database."""
    global _client, _db
    settings = settings or get_mongo_settings()
    if not settings.url:
        raise RuntimeError("MONGO_URL must be set to use MongoDB")
    if _db is not None:
        return _db
    _client = AsyncIOMotorClient(
        settings.url,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.server_selection_timeout_ms,
        maxPoolSize=settings.max_pool_size,
    )
    _db = _client[settings.db]
    logger.info("MongoDB client initialized (db=%s)", settings.db)
    return _db


async def dispose_mongo() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("MongoDB client closed")
    _client = None
    _db = None


def get_mongo_db() -> AsyncIOMotorDatabase:
    if _db is None:
        raise RuntimeError("MongoDB is not initialized; call initialize_mongo() first")
    return _db


async def ping_mongo(db: Optional[AsyncIOMotorDatabase] = None) -> bool:
    try:
        await (db if db is not None else get_mongo_db()).command("ping")
    except (PyMongoError, RuntimeError) as exc:
        logger.warning("MongoDB ping failed: %s", exc)
        return False
    return True
