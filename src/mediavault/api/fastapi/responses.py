from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from mediavault.utils import utcnow


def envelope(
    message: str,
    data: Any = None,
    *,
    success: bool = True,
    errors: Optional[list[dict[str, Any]]] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    if errors:
        body["errors"] = errors
    body["timestamp"] = utcnow().isoformat()
    return body


def ok(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope(message, data)))


def fail(
    message: str,
    status_code: int,
    errors: Optional[list[dict[str, Any]]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope(message, success=False, errors=errors)),
    )
