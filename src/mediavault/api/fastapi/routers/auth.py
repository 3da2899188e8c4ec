from __future__ import annotations

from fastapi import APIRouter, status

from mediavault.auth.models import LoginIn, PasswordChange, ProfileUpdate, RegisterIn

from ..dependencies import CurrentUser, ServicesDep
from ..responses import ok

ROUTER_PREFIX = "/auth"
ROUTER_TAG = "auth"

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, services: ServicesDep):
    result = await services.identity.register(payload)
    return ok(result, "User registered successfully", status_code=status.HTTP_201_CREATED)


@router.post("/login")
async def login(payload: LoginIn, services: ServicesDep):
    result = await services.identity.login(payload)
    return ok(result, "Login successful")


@router.get("/profile")
async def get_profile(user: CurrentUser):
    return ok({"user": user}, "Profile retrieved successfully")


@router.put("/profile")
async def update_profile(payload: ProfileUpdate, user: CurrentUser, services: ServicesDep):
    updated = await services.identity.update_profile(user.id, payload)
    return ok({"user": updated}, "Profile updated successfully")


@router.put("/password")
async def change_password(payload: PasswordChange, user: CurrentUser, services: ServicesDep):
    await services.identity.change_password(user.id, payload)
    return ok(message="Password changed successfully")


@router.post("/refresh")
async def refresh_token(user: CurrentUser, services: ServicesDep):
    token = await services.identity.refresh_token(user.id)
    return ok({"token": token}, "Token refreshed successfully")


@router.get("/stats")
async def user_stats(user: CurrentUser, services: ServicesDep):
    stats = await services.identity.user_stats(user.id)
    return ok(stats, "User statistics retrieved successfully")


@router.delete("/account")
async def deactivate_account(user: CurrentUser, services: ServicesDep):
    await services.identity.deactivate(user.id)
    return ok(message="Account deactivated successfully")
