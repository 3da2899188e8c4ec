from .models import AuthResult, Role, User, UserStats
from .repository import MongoUserRepository, UserRepository
from .service import IdentityService
from .settings import AuthSettings, get_auth_settings
from .tokens import JWTService, TokenClaims

__all__ = [
    "AuthResult",
    "AuthSettings",
    "IdentityService",
    "JWTService",
    "MongoUserRepository",
    "Role",
    "TokenClaims",
    "User",
    "UserRepository",
    "UserStats",
    "get_auth_settings",
]
