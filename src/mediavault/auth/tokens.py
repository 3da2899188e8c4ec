from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from mediavault.exceptions import UnauthorizedError
from mediavault.utils import utcnow

from .settings import AuthSettings


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    issued_at: datetime
    expires_at: datetime


class JWTService:
    """Signs and verifies the bearer tokens handed to clients."""

    def __init__(
        self,
        secret: str,
        *,
        lifetime_seconds: int = 60 * 60 * 24 * 7,
        algorithm: str = "HS256",
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self.lifetime = timedelta(seconds=lifetime_seconds)
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "JWTService":
        return cls(
            settings.jwt_secret.get_secret_value(),
            lifetime_seconds=settings.jwt_lifetime_seconds,
            algorithm=settings.jwt_algorithm,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
        )

    def issue(self, user_id: str, *, now: Optional[datetime] = None) -> str:
        now = now or utcnow()
        payload = {"sub": str(user_id), "iat": now, "exp": now + self.lifetime}
        if self.issuer:
            payload["iss"] = self.issuer
        if self.audience:
            payload["aud"] = self.audience
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise UnauthorizedError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise UnauthorizedError("Invalid token") from exc
        return TokenClaims(
            user_id=str(payload["sub"]),
            issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
