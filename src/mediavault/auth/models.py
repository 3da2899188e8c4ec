from __future__ import annotations

import re
from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import EmailStr, Field, field_validator

from mediavault.models import CamelModel

_NAME = re.compile(r"^[A-Za-z\s]+$")


class Role(StrEnum):
    USER = "user"
    ADMIN = "admin"


class User(CamelModel):
    id: str
    name: str
    email: str
    # never leaves the process
    password_hash: str = Field(default="", exclude=True)
    role: Role = Role.USER
    avatar: Optional[str] = None
    is_active: bool = True
    total_files: int = Field(default=0, ge=0)
    storage_used: int = Field(default=0, ge=0)
    created_at: datetime
    last_login: Optional[datetime] = None

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(exclude={"id"})
        doc["password_hash"] = self.password_hash
        doc["_id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "User":
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)


def _check_name(v: str) -> str:
    v = v.strip()
    if not 2 <= len(v) <= 50:
        raise ValueError("Name must be between 2 and 50 characters")
    if not _NAME.match(v):
        raise ValueError("Name can only contain letters and spaces")
    return v


class RegisterIn(CamelModel):
    name: str
    email: EmailStr
    password: str

    @field_validator("name")
    @classmethod
    def _valid_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _valid_name(cls, v: Optional[str]) -> Optional[str]:
        return _check_name(v) if v is not None else v


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str


class UserStats(CamelModel):
    total_files: int
    storage_used: int
    storage_used_formatted: str
    member_since: datetime
    last_login: Optional[datetime] = None
    is_active: bool


class AuthResult(CamelModel):
    user: User
    token: str
