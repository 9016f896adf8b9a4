from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from floorops.api.middleware.request_id import get_request_id
from floorops.application.errors import (
    ConflictError,
    FloorOpsError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

# Checked in order, so subclasses must come before the bases they extend.
ERROR_STATUS: tuple[tuple[type[FloorOpsError], int], ...] = (
    (ValidationFailedError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}


def status_for(error: FloorOpsError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 400


def error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "error": {"code": code, "message": message, "details": jsonable_encoder(details or {})},
        "requestId": get_request_id(),
    }


async def _floorops_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = cast(FloorOpsError, exc)
    status_code = status_for(error)
    logger.info(
        "request_rejected",
        extra={"path": request.url.path, "status_code": status_code, "error_code": error.code},
    )
    return JSONResponse(
        status_code=status_code,
        content=error_body(error.code, str(error), error.details),
    )


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    return JSONResponse(
        status_code=http_exc.status_code,
        content=error_body(
            HTTP_ERROR_CODES.get(http_exc.status_code, "HTTP_ERROR"),
            str(http_exc.detail) if http_exc.detail else "request failed",
        ),
        headers=getattr(http_exc, "headers", None),
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in cast(RequestValidationError, exc).errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("INVALID_REQUEST", "request validation failed", {"errors": errors}),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_error",
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(
        status_code=500,
        content=error_body("INTERNAL_ERROR", "internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FloorOpsError, _floorops_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
