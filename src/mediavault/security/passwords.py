from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from fastapi_users.password import PasswordHelper

from mediavault.exceptions import InvalidInputError


@dataclass
class PasswordPolicy:
    min_length: int = 6
    max_length: int = 128
    require_upper: bool = True
    require_lower: bool = True
    require_digit: bool = True


class PasswordValidationError(InvalidInputError):
    def __init__(self, reasons: Iterable[str]):
        self.reasons = list(reasons)
        super().__init__(
            "Password validation failed",
            errors=[{"field": "password", "message": r, "value": None} for r in self.reasons],
        )


UPPER = re.compile(r"[A-Z]")
LOWER = re.compile(r"[a-z]")
DIGIT = re.compile(r"[0-9]")


def validate_password(pw: str, policy: PasswordPolicy | None = None) -> None:
    policy = policy or PasswordPolicy()
    reasons: list[str] = []
    if len(pw) < policy.min_length:
        reasons.append(f"Password must be at least {policy.min_length} characters long")
    if len(pw) > policy.max_length:
        reasons.append(f"Password must be at most {policy.max_length} characters long")
    if policy.require_upper and not UPPER.search(pw):
        reasons.append("Password must contain at least one uppercase letter")
    if policy.require_lower and not LOWER.search(pw):
        reasons.append("Password must contain at least one lowercase letter")
    if policy.require_digit and not DIGIT.search(pw):
        reasons.append("Password must contain at least one number")
    if reasons:
        raise PasswordValidationError(reasons)


_helper = PasswordHelper()


def hash_password(pw: str) -> str:
    return _helper.hash(pw)


def verify_password(pw: str, hashed: str) -> tuple[bool, str | None]:
    """Return (matches, upgraded_hash); upgraded_hash is set when the stored hash is outdated."""
    if not hashed:
        return False, None
    return _helper.verify_and_update(pw, hashed)


__all__ = [
    "PasswordPolicy",
    "PasswordValidationError",
    "hash_password",
    "validate_password",
    "verify_password",
]
