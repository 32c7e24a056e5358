from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vapecave.core.context import get_request_id

logger = logging.getLogger("vapecave.errors")


class AppError(Exception):
    status_code: int = 500
    error_type: str = "APP_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BadRequestError(AppError):
    status_code = 400
    error_type = "BAD_REQUEST"


class AuthenticationError(AppError):
    status_code = 401
    error_type = "UNAUTHORIZED"


class PermissionDeniedError(AppError):
    status_code = 403
    error_type = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    error_type = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    error_type = "CONFLICT"


class ConfigurationError(AppError):
    status_code = 500
    error_type = "CONFIGURATION_ERROR"


def _error_payload(error_type: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "error": {
            "type": error_type,
            "message": message,
        }
    }
    if details:
        payload["error"]["details"] = details
    trace_id = get_request_id()
    if trace_id:
        payload["error"]["traceId"] = trace_id
    return payload


def _field_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    fields: list[dict[str, Any]] = []
    for error in exc.errors():
        fields.append(
            {
                "loc": [str(part) for part in error.get("loc", ())],
                "msg": error.get("msg", ""),
                "type": error.get("type", ""),
            }
        )
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("app_error", extra={"error_type": exc.error_type, "path": request.url.path})
        payload = _error_payload(exc.error_type, exc.message, exc.details)
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        payload = _error_payload(
            "VALIDATION_ERROR",
            "Request validation failed.",
            {"fields": _field_errors(exc)},
        )
        return JSONResponse(status_code=400, content=payload)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", extra={"path": request.url.path, "method": request.method})
        payload = _error_payload("INTERNAL_ERROR", "Internal server error.")
        return JSONResponse(status_code=500, content=payload)
