"""
Custom exception classes and FastAPI exception handlers.

Every error response carries a stable machine-readable ``error`` kind plus a
human-readable ``detail`` message.
"""

import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from mess_feedback.config import settings

log = logging.getLogger(__name__)

# Driver and network failures that mean storage cannot be reached. OSError
# covers DNS failures (socket.gaierror), refused connections and timeouts.
STORAGE_ERRORS = (OperationalError, InterfaceError, OSError, asyncio.TimeoutError)


class AppException(Exception):
    """Base application exception."""

    kind = "internal"

    def __init__(self, status_code: int, detail: str):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class InvalidInputException(AppException):
    kind = "invalid_input"

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=400, detail=detail)


class ConflictException(AppException):
    kind = "conflict"

    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=400, detail=detail)


class UnauthorizedException(AppException):
    kind = "unauthorized"

    def __init__(self, detail: str = "Access token required"):
        super().__init__(status_code=401, detail=detail)


class InvalidCredentialsException(AppException):
    """Login failure. Same message whether the user is unknown or the password is wrong."""

    kind = "invalid_credentials"

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=401, detail=detail)


class InvalidTokenException(AppException):
    kind = "invalid_token"

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(status_code=403, detail=detail)


class ForbiddenException(AppException):
    kind = "forbidden"

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=403, detail=detail)


class NotFoundException(AppException):
    kind = "not_found"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=404, detail=detail)


class ConfigurationError(AppException):
    kind = "configuration_error"

    def __init__(self, detail: str):
        super().__init__(status_code=500, detail=detail)


class ServiceUnavailableException(AppException):
    kind = "service_unavailable"

    def __init__(self, detail: str = "Database not connected"):
        super().__init__(status_code=503, detail=detail)


def _error_body(kind: str, detail: str, **extra) -> dict:
    return {"error": kind, "detail": detail, **extra}


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            log.error("%s on %s: %s", exc.kind, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.kind, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        log.warning("Validation error on %s: %s", request.url.path, errors)
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", [])[1:])
        message = first.get("msg", "Request validation failed")
        if field:
            message = f"{field}: {message}"
        return JSONResponse(
            status_code=400,
            content=_error_body(InvalidInputException.kind, message, errors=errors),
        )

    async def storage_exception_handler(request: Request, exc: Exception):
        log.error("Storage unavailable on %s: %s", request.url.path, exc)
        unavailable = ServiceUnavailableException()
        return JSONResponse(
            status_code=unavailable.status_code,
            content=_error_body(unavailable.kind, unavailable.detail),
        )

    for exc_class in STORAGE_ERRORS:
        app.add_exception_handler(exc_class, storage_exception_handler)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        log.exception("Unexpected error on %s", request.url.path)
        detail = "Internal server error"
        if settings.DEBUG:
            detail = f"{detail}: {exc!r}"
        return JSONResponse(
            status_code=500,
            content=_error_body("internal", detail),
        )
