from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mediavault.exceptions import MediaVaultError
from mediavault.models import field_errors

from ...responses import fail

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MediaVaultError)
    async def _service_error(request: Request, exc: MediaVaultError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        return fail(exc.message, exc.status_code, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header")]
            value = err.get("input")
            errors.append(
                {
                    "field": ".".join(loc) or None,
                    "message": err.get("msg"),
                    "value": value if isinstance(value, (str, int, float, bool)) else None,
                }
            )
        return fail("Validation failed", 400, errors)

    @app.exception_handler(ValidationError)
    async def _model_validation(request: Request, exc: ValidationError):
        return fail("Validation failed", 400, field_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return fail("Route not found", 404)
        return fail(str(exc.detail), exc.status_code)
