"""
HTTP error envelope

{success: false, timestamp, error: {code, message, details?}}
details only when running in development.
"""

import logging
import time
import traceback
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from satellite.config import settings
from satellite.domain.exceptions import (
    NotInitializedError,
    RepositoryError,
    RepositoryErrorKind,
    ValidationError,
)
from satellite.utils.time import to_iso, utc_now

logger = logging.getLogger(__name__)


def success_envelope(data: Any) -> Dict[str, Any]:
    return {"success": True, "timestamp": to_iso(utc_now()), "data": data}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and a start time"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request.state.started_at = time.monotonic()

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    error: Optional[BaseException] = None,
    extra: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    body: Dict[str, Any] = {"code": code, "message": message}

    if settings.is_development:
        details: Dict[str, Any] = {
            "request_id": getattr(request.state, "request_id", None),
        }
        started_at = getattr(request.state, "started_at", None)
        if started_at is not None:
            details["processing_time_ms"] = int((time.monotonic() - started_at) * 1000)
        if error is not None:
            details["original_message"] = str(error)
            details["stack"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        if extra:
            details.update(extra)
        body["details"] = details

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "timestamp": to_iso(utc_now()), "error": body},
    )


def repository_error_code(error: RepositoryError) -> str:
    if error.kind == RepositoryErrorKind.UNKNOWN:
        return "DATABASE_ERROR"
    return f"DATABASE_{error.kind.value}_ERROR"


def register_exception_handlers(app: FastAPI) -> None:
    """Register the envelope handlers on an application"""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return error_response(
            request, status.HTTP_400_BAD_REQUEST, exc.code, str(exc),
            extra={"field": exc.field} if exc.field else None,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return error_response(
            request, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR",
            f"{location}: {message}" if location else message,
            extra={"errors": [
                {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg")} for e in errors
            ]},
        )

    @app.exception_handler(NotInitializedError)
    async def not_initialized_handler(request: Request, exc: NotInitializedError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path}: {exc}")
        return error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "NOT_INITIALIZED", str(exc)
        )

    @app.exception_handler(RepositoryError)
    async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path}: {exc}")
        return error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR,
            repository_error_code(exc), exc.safe_message, error=exc.cause or exc,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            code, message = "NOT_FOUND", f"Route not found: {request.url.path}"
        elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            code, message = "METHOD_NOT_ALLOWED", f"Method {request.method} not allowed"
        else:
            code, message = "HTTP_ERROR", str(exc.detail)
        response = error_response(request, exc.status_code, code, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR",
            "An unexpected error occurred", error=exc,
        )
