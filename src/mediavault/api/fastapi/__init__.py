from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mediavault.app.core.env import get_env, pick
from mediavault.app.settings import AppSettings, get_app_settings
from mediavault.files.settings import get_upload_settings
from mediavault.services import Services, build_services, close_services

from .middleware.errors.catchall import CatchAllExceptionMiddleware
from .middleware.errors.error_handlers import register_error_handlers
from .middleware.request_size_limit import RequestSizeLimitMiddleware
from .routers import register_all_routers

logger = logging.getLogger(__name__)

# multipart framing on top of the largest accepted file
MULTIPART_OVERHEAD = 1024 * 1024


def create_app(
    *,
    services: Optional[Services] = None,
    app_settings: Optional[AppSettings] = None,
) -> FastAPI:
    """Build the HTTP API.

    With ``services`` given (tests), they are attached immediately and never
    closed by the app. Otherwise they are built from settings on startup and
    released on shutdown.
    """
    settings = app_settings or get_app_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is not None:
            yield
            return
        app.state.services = await build_services()
        try:
            yield
        finally:
            await close_services(app.state.services)

    app = FastAPI(
        title=settings.name,
        version=settings.version,
        lifespan=lifespan,
        docs_url=pick(prod=None, nonprod="/docs"),
        redoc_url=None,
    )
    if services is not None:
        app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    max_upload = services.upload_settings.max_file_size if services else get_upload_settings().max_file_size
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=max_upload + MULTIPART_OVERHEAD)

    # Error handling
    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    register_all_routers(app, base_package="mediavault.api.fastapi.routers", prefix=settings.api_prefix)

    logger.info(f"{settings.version} version of {settings.name} initialized [env: {get_env()}]")
    return app


__all__ = ["create_app"]
