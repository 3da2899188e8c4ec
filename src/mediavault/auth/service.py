from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from bson import ObjectId

from mediavault.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from mediavault.models import parse_model
from mediavault.security.passwords import (
    PasswordPolicy,
    hash_password,
    validate_password,
    verify_password,
)
from mediavault.utils import format_bytes, utcnow

from .models import (
    AuthResult,
    LoginIn,
    PasswordChange,
    ProfileUpdate,
    RegisterIn,
    User,
    UserStats,
)
from .repository import UserRepository
from .tokens import JWTService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

UsageSource = Callable[[str], Awaitable[tuple[int, int]]]


class IdentityService:
    """Registration, login and the bearer-token contract every other route relies on.

    Accounts move one way: active, then deactivated. A deactivated account
    can neither log in nor use a previously issued token.
    """

    def __init__(
        self,
        users: UserRepository,
        tokens: JWTService,
        *,
        password_policy: Optional[PasswordPolicy] = None,
        usage_source: Optional[UsageSource] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.users = users
        self.tokens = tokens
        self.password_policy = password_policy or PasswordPolicy()
        self.usage_source = usage_source
        self.clock = clock

    async def register(self, data: RegisterIn | dict[str, Any]) -> AuthResult:
        payload = data if isinstance(data, RegisterIn) else parse_model(RegisterIn, data)
        validate_password(payload.password, self.password_policy)

        if await self.users.get_by_email(payload.email) is not None:
            raise ConflictError("User already exists with this email")

        user = User(
            id=str(ObjectId()),
            name=payload.name,
            email=payload.email.lower(),
            password_hash=hash_password(payload.password),
            created_at=self.clock(),
        )
        # the unique index still guards the race between lookup and insert
        user = await self.users.create(user)
        logger.info("Registered user %s", user.id, extra={"user_id": user.id})
        return AuthResult(user=user, token=self.tokens.issue(user.id))

    async def login(self, data: LoginIn | dict[str, Any]) -> AuthResult:
        payload = data if isinstance(data, LoginIn) else parse_model(LoginIn, data)

        user = await self.users.get_by_email(payload.email)
        if user is None or not user.is_active:
            raise UnauthorizedError(INVALID_CREDENTIALS)
        verified, upgraded_hash = verify_password(payload.password, user.password_hash)
        if not verified:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        fields: dict[str, Any] = {"last_login": self.clock()}
        if upgraded_hash:
            fields["password_hash"] = upgraded_hash
        user = await self.users.update(user.id, fields) or user
        return AuthResult(user=user, token=self.tokens.issue(user.id))

    async def authenticate(self, token: str) -> User:
        """Resolve a bearer token to an active user or raise UnauthorizedError."""
        if not token:
            raise UnauthorizedError("Access denied. No token provided.")
        claims = self.tokens.verify(token)
        user = await self.users.get_by_id(claims.user_id)
        if user is None or not user.is_active:
            raise UnauthorizedError("Invalid token or user inactive")
        return user

    async def refresh_token(self, user_id: str) -> str:
        user = await self._require(user_id)
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")
        return self.tokens.issue(user.id)

    async def get_profile(self, user_id: str) -> User:
        return await self._require(user_id)

    async def update_profile(self, user_id: str, data: ProfileUpdate | dict[str, Any]) -> User:
        payload = data if isinstance(data, ProfileUpdate) else parse_model(ProfileUpdate, data)
        fields = payload.model_dump(include=payload.model_fields_set)
        # a null name would break the record; avatar may be cleared
        if fields.get("name") is None:
            fields.pop("name", None)
        if not fields:
            return await self._require(user_id)
        user = await self.users.update(user_id, fields)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def change_password(self, user_id: str, data: PasswordChange | dict[str, Any]) -> None:
        payload = data if isinstance(data, PasswordChange) else parse_model(PasswordChange, data)
        user = await self._require(user_id)

        verified, _ = verify_password(payload.current_password, user.password_hash)
        if not verified:
            raise InvalidInputError("Current password is incorrect")
        validate_password(payload.new_password, self.password_policy)

        await self.users.update(user_id, {"password_hash": hash_password(payload.new_password)})
        logger.info("Password changed for user %s", user_id, extra={"user_id": user_id})

    async def deactivate(self, user_id: str) -> None:
        await self._require(user_id)
        await self.users.update(user_id, {"is_active": False})
        logger.info("Deactivated user %s", user_id, extra={"user_id": user_id})

    async def user_stats(self, user_id: str) -> UserStats:
        user = await self._require(user_id)
        total_files, storage_used = user.total_files, user.storage_used
        if self.usage_source is not None:
            total_files, storage_used = await self.usage_source(user_id)
        return UserStats(
            total_files=total_files,
            storage_used=storage_used,
            storage_used_formatted=format_bytes(storage_used),
            member_since=user.created_at,
            last_login=user.last_login,
            is_active=user.is_active,
        )

    async def _require(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
