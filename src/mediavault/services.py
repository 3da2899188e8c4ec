from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavault.app.core.env import Env, get_env
from mediavault.auth.memory import InMemoryUserRepository
from mediavault.auth.repository import MongoUserRepository, UserRepository
from mediavault.auth.service import IdentityService
from mediavault.auth.settings import AuthSettings, get_auth_settings
from mediavault.auth.tokens import JWTService
from mediavault.db.nosql.mongo.session import dispose_mongo, initialize_mongo, ping_mongo
from mediavault.db.nosql.settings import MongoSettings, get_mongo_settings
from mediavault.files.lifecycle import FileLifecycleManager
from mediavault.files.memory import InMemoryFileRepository
from mediavault.files.repository import FileRepository, MongoFileRepository
from mediavault.files.settings import UploadSettings, get_upload_settings
from mediavault.search.executor import SearchExecutor
from mediavault.search.settings import SearchSettings, get_search_settings
from mediavault.security.passwords import PasswordPolicy
from mediavault.storage.base import StorageBackend
from mediavault.storage.easy import easy_storage
from mediavault.storage.settings import StorageSettings, get_storage_settings

logger = logging.getLogger(__name__)


@dataclass
class Services:
    identity: IdentityService
    lifecycle: FileLifecycleManager
    search: SearchExecutor
    storage: StorageBackend
    upload_settings: UploadSettings
    db: Optional[AsyncIOMotorDatabase] = None

    async def health(self) -> dict[str, str]:
        database = "memory" if self.db is None else ("up" if await ping_mongo(self.db) else "down")
        storage = "up" if await self.storage.ping() else "down"
        return {"database": database, "storage": storage}


def wire_services(
    *,
    users: UserRepository,
    files: FileRepository,
    storage: StorageBackend,
    auth_settings: AuthSettings,
    upload_settings: Optional[UploadSettings] = None,
    search_settings: Optional[SearchSettings] = None,
    storage_folder: str = "multimedia-app",
    db: Optional[AsyncIOMotorDatabase] = None,
) -> Services:
    upload_settings = upload_settings or UploadSettings()
    lifecycle = FileLifecycleManager(
        files,
        users,
        storage,
        upload_settings=upload_settings,
        storage_folder=storage_folder,
    )
    identity = IdentityService(
        users,
        JWTService.from_settings(auth_settings),
        password_policy=PasswordPolicy(min_length=auth_settings.password_min_length),
        usage_source=lifecycle.recompute_usage,
    )
    return Services(
        identity=identity,
        lifecycle=lifecycle,
        search=SearchExecutor(files, search_settings or SearchSettings()),
        storage=storage,
        upload_settings=upload_settings,
        db=db,
    )


def memory_services(
    auth_settings: AuthSettings,
    *,
    storage: Optional[StorageBackend] = None,
    upload_settings: Optional[UploadSettings] = None,
    search_settings: Optional[SearchSettings] = None,
    storage_folder: str = "multimedia-app",
) -> Services:
    """Everything in process; used by tests and by local runs without MONGO_URL."""
    return wire_services(
        users=InMemoryUserRepository(),
        files=InMemoryFileRepository(),
        storage=storage or easy_storage(backend="memory"),
        auth_settings=auth_settings,
        upload_settings=upload_settings,
        search_settings=search_settings,
        storage_folder=storage_folder,
    )


async def build_services(
    *,
    env: Optional[Env] = None,
    auth_settings: Optional[AuthSettings] = None,
    mongo_settings: Optional[MongoSettings] = None,
    storage_settings: Optional[StorageSettings] = None,
) -> Services:
    env = env or get_env()
    auth_settings = auth_settings or get_auth_settings()
    mongo_settings = mongo_settings or get_mongo_settings()
    storage_settings = storage_settings or get_storage_settings()

    storage = easy_storage(settings=storage_settings)

    if not mongo_settings.url:
        if env == Env.PROD:
            raise RuntimeError("MONGO_URL must be set in production")
        logger.warning("MONGO_URL not set; using in-memory repositories (data is not persisted)")
        return memory_services(
            auth_settings,
            storage=storage,
            upload_settings=get_upload_settings(),
            search_settings=get_search_settings(),
            storage_folder=storage_settings.folder,
        )

    db = await initialize_mongo(mongo_settings)
    users = MongoUserRepository(db)
    files = MongoFileRepository(db)
    await users.ensure_indexes()
    await files.ensure_indexes()
    return wire_services(
        users=users,
        files=files,
        storage=storage,
        auth_settings=auth_settings,
        upload_settings=get_upload_settings(),
        search_settings=get_search_settings(),
        storage_folder=storage_settings.folder,
        db=db,
    )


async def close_services(services: Services) -> None:
    if services.db is not None:
        await dispose_mongo()
