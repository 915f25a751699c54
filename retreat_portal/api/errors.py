"""Error taxonomy and JSON error responses.

Every error leaves the API as ``{"error", "code", "details"}`` where
``details.requestId`` is always set, with the matching HTTP status.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from retreat_portal.application.validation import ValidationResult
from retreat_portal.domain.exceptions import (
    ConstraintKind,
    ConstraintViolationError,
    DomainError,
    DuplicateResourceError,
    InvalidCredentialsError,
    LoginRateLimitedError,
    NoFieldsToUpdateError,
    ResourceInUseError,
    ResourceNotFoundError,
    StorageUnavailableError,
)


logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Session-ID",
}

_BASE36 = string.digits + string.ascii_lowercase


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


ERROR_STATUS = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.BAD_REQUEST: 400,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
    ErrorCode.SERVICE_UNAVAILABLE: 503,
}


class AppError(Exception):
    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        request_id: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.status = ERROR_STATUS[code]
        self.message = message
        self.details = details or {}
        self.request_id = request_id
        self.headers = headers or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code.value,
            "details": {**self.details, "requestId": self.request_id},
        }


def _base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_request_id() -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"req_{_base36(int(time.time() * 1000))}_{suffix}"


def validation(fields: dict[str, str], request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.VALIDATION_ERROR, "Validation failed", {"fields": fields}, request_id)


def ensure_valid(result: ValidationResult) -> None:
    if not result.valid:
        raise validation(result.errors)


def unauthorized(message: str = "Unauthorized", request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.UNAUTHORIZED, message, request_id=request_id)


def forbidden(message: str = "Forbidden", request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.FORBIDDEN, message, request_id=request_id)


def not_found(resource: str, request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.NOT_FOUND, f"{resource} not found", request_id=request_id)


def conflict(message: str, request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.CONFLICT, message, request_id=request_id)


def bad_request(message: str, request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.BAD_REQUEST, message, request_id=request_id)


def internal(message: str = "Internal server error", request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.INTERNAL_ERROR, message, request_id=request_id)


def database(message: str = "Database error", request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.DATABASE_ERROR, message, request_id=request_id)


def rate_limited(
    retry_after: int | None = None,
    request_id: str | None = None,
    message: str = "Rate limit exceeded",
) -> AppError:
    headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
    return AppError(
        ErrorCode.RATE_LIMITED,
        message,
        {"retryAfter": retry_after},
        request_id,
        headers=headers,
    )


def external_service(service: str, request_id: str | None = None, detail: str | None = None) -> AppError:
    message = f"{service} error: {detail}" if detail else f"{service} service error"
    return AppError(ErrorCode.EXTERNAL_SERVICE_ERROR, message, request_id=request_id)


def service_unavailable(message: str = "Service unavailable", request_id: str | None = None) -> AppError:
    return AppError(ErrorCode.SERVICE_UNAVAILABLE, message, request_id=request_id)


_CONSTRAINT_ERRORS = {
    ConstraintKind.UNIQUE: lambda request_id: conflict("Resource already exists", request_id),
    ConstraintKind.FOREIGN_KEY: lambda request_id: bad_request("Referenced resource does not exist", request_id),
    ConstraintKind.NOT_NULL: lambda request_id: bad_request("Required field is missing", request_id),
    ConstraintKind.CHECK: lambda request_id: bad_request("Invalid field value", request_id),
}

_MESSAGE_FALLBACKS = (
    ("UNIQUE constraint failed", ConstraintKind.UNIQUE),
    ("FOREIGN KEY constraint failed", ConstraintKind.FOREIGN_KEY),
    ("NOT NULL constraint failed", ConstraintKind.NOT_NULL),
)


def from_domain_error(error: DomainError, request_id: str | None = None) -> AppError:
    if isinstance(error, ConstraintViolationError):
        return _CONSTRAINT_ERRORS[error.kind](request_id)
    if isinstance(error, StorageUnavailableError):
        return database(request_id=request_id)
    if isinstance(error, ResourceNotFoundError):
        return not_found(error.resource, request_id)
    if isinstance(error, (DuplicateResourceError, ResourceInUseError)):
        return conflict(str(error), request_id)
    if isinstance(error, NoFieldsToUpdateError):
        return bad_request(str(error), request_id)
    if isinstance(error, InvalidCredentialsError):
        return unauthorized(str(error), request_id)
    if isinstance(error, LoginRateLimitedError):
        return rate_limited(error.retry_after_seconds, request_id, message=str(error))
    return internal(request_id=request_id)


def handle_error(error: BaseException, request_id: str | None = None) -> AppError:
    """Turn any exception into an ``AppError``.

    Unknown errors become an opaque 500; their message is never sent to the client.
    """
    if isinstance(error, AppError):
        if request_id and not error.request_id:
            error.request_id = request_id
        return error
    if isinstance(error, DomainError):
        return from_domain_error(error, request_id)

    message = str(error)
    for marker, kind in _MESSAGE_FALLBACKS:
        if marker in message:
            return _CONSTRAINT_ERRORS[kind](request_id)
    return internal(request_id=request_id)


def from_http_exception(exc: StarletteHTTPException, request_id: str | None = None) -> AppError:
    """Routing errors raised by the framework (unknown path, wrong method)."""
    if exc.status_code == 404:
        error = not_found("Route", request_id)
    elif exc.status_code < 500:
        error = bad_request(str(exc.detail), request_id)
    else:
        error = internal(request_id=request_id)
    if exc.headers:
        error.headers.update(exc.headers)
    return error


def create_error_response(error: AppError) -> JSONResponse:
    headers = dict(CORS_HEADERS)
    headers.update(error.headers)
    if error.request_id:
        headers["X-Request-ID"] = error.request_id
    return JSONResponse(status_code=error.status, content=error.to_dict(), headers=headers)


def request_id_of(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = generate_request_id()
        request.state.request_id = request_id
    return request_id


def _request_validation_fields(exc: RequestValidationError) -> dict[str, str]:
    fields: dict[str, str] = {}
    for item in exc.errors():
        location = [str(part) for part in item.get("loc", ()) if part not in ("body", "query", "path")]
        fields[".".join(location) or "body"] = item.get("msg", "Invalid value")
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return create_error_response(handle_error(exc, request_id_of(request)))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return create_error_response(validation(_request_validation_fields(exc), request_id_of(request)))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return create_error_response(from_http_exception(exc, request_id_of(request)))

    @app.exception_handler(DomainError)
    async def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        return create_error_response(handle_error(exc, request_id_of(request)))


def unhandled_error_response(exc: Exception, request_id: str, path: str) -> JSONResponse:
    error = handle_error(exc, request_id)
    if error.status >= 500:
        logger.exception("api: unhandled error request_id=%s path=%s", request_id, path)
    else:
        logger.info("api: mapped error request_id=%s code=%s", request_id, error.code.value)
    return create_error_response(error)
