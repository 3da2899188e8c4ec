from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware

from mediavault.utils import format_bytes

from ..responses import fail


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_bytes: int = 1_000_000):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request, call_next):
        length = request.headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None
        if size is not None and size > self.max_bytes:
            return fail(f"Request body exceeds {format_bytes(self.max_bytes)}", 413)
        return await call_next(request)
