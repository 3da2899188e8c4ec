from __future__ import annotations

from typing import Any, Optional

from mediavault.exceptions import ConflictError

from .models import User
from .repository import UserRepository


class InMemoryUserRepository(UserRepository):
    """Dict backed user directory for tests and local runs."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    async def create(self, user: User) -> User:
        email = user.email.lower()
        if any(u.email == email for u in self._users.values()):
            raise ConflictError("User already exists with this email")
        stored = user.model_copy(update={"email": email})
        self._users[stored.id] = stored
        return stored.model_copy()

    async def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        for user in self._users.values():
            if user.email == email:
                return user.model_copy()
        return None

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        self._users[user_id] = user.model_copy(update=fields)
        return self._users[user_id].model_copy()

    async def adjust_usage(self, user_id: str, *, files: int, size: int) -> None:
        user = self._users.get(user_id)
        if user is None:
            return
        self._users[user_id] = user.model_copy(
            update={
                "total_files": max(0, user.total_files + files),
                "storage_used": max(0, user.storage_used + size),
            }
        )

    async def set_usage(self, user_id: str, *, total_files: int, storage_used: int) -> None:
        await self.update(
            user_id, {"total_files": max(0, total_files), "storage_used": max(0, storage_used)}
        )
