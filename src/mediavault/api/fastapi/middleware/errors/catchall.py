from starlette.middleware.base import BaseHTTPMiddleware
import logging

from mediavault.app.core.env import env_flags

from ...responses import fail

logger = logging.getLogger(__name__)


class CatchAllExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(f"{type(exc).__name__} on {request.url.path} (500): {exc}", exc_info=True)
            # exception text stays in the logs in production
            message = "Internal server error" if env_flags().is_prod else f"{type(exc).__name__}: {exc}"
            return fail(message, 500)
