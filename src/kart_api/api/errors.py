"""
kart_api.api.errors

Exception handlers that render the error taxonomy as JSON.

Responsibilities:
- Auth rejections -> `{message, error, details?}` with 401 (500 for
  server_config_error).
- Other `KartError`s -> `{message}` with the error's status code.
- Request body validation failures -> 400 `{message, details}`.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kart_api.errors import AuthError, KartError
from kart_api.observability.logging import get_logger

log = get_logger(__name__)


async def _auth_error(_: Request, exc: AuthError) -> JSONResponse:
    content: dict[str, Any] = {"message": exc.message, "error": exc.error_code}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def _kart_error(_: Request, exc: KartError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request_failed", error_type=type(exc).__name__, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "details": details},
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette picks the most specific handler by MRO, so AuthError wins over KartError.
    app.add_exception_handler(AuthError, _auth_error)  # type: ignore[arg-type]
    app.add_exception_handler(KartError, _kart_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
