"""
Typed application errors and the FastAPI handlers that render them.

Every error leaves the API in the same envelope:
``{"success": false, "message": ..., "status": ..., "data": ..., "details": ...}``
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Server error, please try again later"


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500
    default_message = GENERIC_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, data: Any = None, details: Any = None):
        self.message = message or self.default_message
        self.data = data
        self.details = details
        super().__init__(self.message)


class BadRequestError(AppError):
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


def error_body(message: str, status: int, data: Any = None, details: Any = None) -> dict:
    return {
        "success": False,
        "message": message,
        "status": status,
        "data": data,
        "details": details,
    }


def _detail_message(detail: Any) -> str:
    if isinstance(detail, str):
        return detail
    if isinstance(detail, dict) and isinstance(detail.get("detail"), str):
        return detail["detail"]
    if detail is None:
        return "An error occurred"
    return str(detail)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers that turn every failure into the error envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.status_code, exc.data, exc.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        response = JSONResponse(
            status_code=exc.status_code,
            content=error_body(_detail_message(exc.detail), exc.status_code),
        )
        if exc.headers:
            for key, value in exc.headers.items():
                response.headers[key] = value
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = []
        for error in exc.errors():
            location = [str(loc) for loc in error.get("loc", []) if loc != "body"]
            details.append({
                "field": ".".join(location) if location else None,
                "message": error.get("msg", "Invalid input"),
            })
        return JSONResponse(
            status_code=400,
            content=error_body("Validation failed", 400, details=details),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception while processing {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=error_body(GENERIC_SERVER_ERROR, 500))


__all__ = [
    "AppError",
    "BadRequestError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "register_exception_handlers",
]
