"""
Error taxonomy and the boundary handlers that turn exceptions into the
JSON error envelope:

    {"success": false, "error": {"message", "code", "details", "timestamp"}}

Services raise the ApiError subclasses where a rule is violated; the
handlers registered in main.py are the only place responses are built.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """Base class for every error that reaches the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(status_code=self.status_code, detail=self.message)


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "BAD_REQUEST"
    default_message = "Bad request"


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


class PayloadTooLargeError(ApiError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "PAYLOAD_TOO_LARGE"
    default_message = "File too large"


class InternalError(ApiError):
    pass


# Codes for plain HTTPExceptions raised by FastAPI/Starlette themselves
_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    429: "TOO_MANY_REQUESTS",
}


def error_body(message: str, code: Optional[str], details: Any = None) -> dict:
    """Build the error envelope."""
    error = {
        "message": message,
        "code": code,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


def _send(status_code: int, body: dict, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
    return _send(exc.status_code, error_body(exc.message, exc.code, exc.details), exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        # drop the leading "body"/"query" segment from the location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        details.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return _send(400, error_body("Validation failed", BadRequestError.code, details))


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    key_value = (exc.details or {}).get("keyValue") or {}
    field = next(iter(key_value), "resource")
    return _send(409, error_body(f"{field} already exists", ConflictError.code))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return _send(exc.status_code, error_body(message, code), getattr(exc, "headers", None))


# plain def: SlowAPIMiddleware calls it without awaiting
def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    message = getattr(exc.limit, "error_message", None) or "Too many requests from this IP, please try again later."
    logger.warning("Rate limit %s hit on %s %s", exc.limit.limit, request.method, request.url.path)
    return _send(429, error_body(message, "TOO_MANY_REQUESTS"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _send(500, error_body("Something went wrong", InternalError.code))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the boundary handlers. Order does not matter; FastAPI picks by MRO."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
