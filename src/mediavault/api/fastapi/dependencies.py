from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mediavault.auth.models import User
from mediavault.exceptions import InternalError, UnauthorizedError
from mediavault.services import Services

bearer = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise InternalError("Services are not initialized")
    return services


ServicesDep = Annotated[Services, Depends(get_services)]


async def current_user(
    services: ServicesDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access denied. No token provided.")
    return await services.identity.authenticate(credentials.credentials)


CurrentUser = Annotated[User, Depends(current_user)]
