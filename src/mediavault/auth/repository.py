from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from mediavault.db.nosql import NoSqlRepository, translate_errors
from mediavault.exceptions import ConflictError

from .models import User

USERS_COLLECTION = "users"


class UserRepository(ABC):
    """Credential store / user directory."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert ``user``; duplicate email raises :class:`ConflictError`."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[User]: ...

    @abstractmethod
    async def adjust_usage(self, user_id: str, *, files: int, size: int) -> None:
        """Atomically add the deltas to the usage counters, never going below zero."""

    @abstractmethod
    async def set_usage(self, user_id: str, *, total_files: int, storage_used: int) -> None: ...

    async def ensure_indexes(self) -> None:
        return None


def _clamped_add(field: str, delta: int) -> dict[str, Any]:
    return {"$max": [0, {"$add": [{"$ifNull": [f"${field}", 0]}, delta]}]}


class MongoUserRepository(UserRepository):
    def __init__(self, db: AsyncIOMotorDatabase):
        self.repo = NoSqlRepository(db[USERS_COLLECTION])

    async def ensure_indexes(self) -> None:
        async with translate_errors(self.repo.name):
            await self.repo.collection.create_index([("email", ASCENDING)], unique=True)

    async def create(self, user: User) -> User:
        try:
            await self.repo.insert(user.to_document())
        except ConflictError as exc:
            raise ConflictError("User already exists with this email") from exc
        return user

    async def get_by_id(self, user_id: str) -> Optional[User]:
        doc = await self.repo.get({"_id": user_id})
        return User.from_document(doc) if doc else None

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await self.repo.get({"email": email.lower()})
        return User.from_document(doc) if doc else None

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[User]:
        doc = await self.repo.update({"_id": user_id}, {"$set": fields})
        return User.from_document(doc) if doc else None

    async def adjust_usage(self, user_id: str, *, files: int, size: int) -> None:
        # pipeline update keeps the clamp and the increment in one server-side step
        await self.repo.update(
            {"_id": user_id},
            [
                {
                    "$set": {
                        "total_files": _clamped_add("total_files", files),
                        "storage_used": _clamped_add("storage_used", size),
                    }
                }
            ],
        )

    async def set_usage(self, user_id: str, *, total_files: int, storage_used: int) -> None:
        await self.repo.update(
            {"_id": user_id},
            {"$set": {"total_files": max(0, total_files), "storage_used": max(0, storage_used)}},
        )
