from __future__ import annotations

from fastapi import APIRouter, status

from mediavault.app.core.env import get_env
from mediavault.app.settings import get_app_settings

from ..dependencies import ServicesDep
from ..responses import fail, ok

ROUTER_TAG = "health"

router = APIRouter()


@router.get("/health")
async def health(services: ServicesDep):
    checks = await services.health()
    settings = get_app_settings()
    body = {
        "status": "ok",
        "environment": get_env(),
        "version": settings.version,
        **checks,
    }
    down = [name for name, state in checks.items() if state == "down"]
    if down:
        return fail(
            "Service degraded",
            status.HTTP_503_SERVICE_UNAVAILABLE,
            [{"field": name, "message": "unreachable", "value": None} for name in down],
        )
    return ok(body, f"{settings.name} API is running")
