"""Error Handlers — every failure leaves the API in the ArtiquityError envelope.

Invariants:
    - ArtiquityError → its own status and to_response() body
    - 429 responses carry Retry-After in whole seconds, rounded up
    - slowapi RateLimitExceeded → 429 RATE_LIMIT_EXCEEDED, retry time taken
      from the exhausted window
    - RequestValidationError → 400 VALIDATION_ERROR, details list one entry per
      failing field, context.field naming the first one
    - Exception (catch-all) → 500 INTERNAL_ERROR, never leaks internal details

Design Decisions:
    - Validation and unexpected errors are wrapped into ArtiquityError instances
      so the wizard parses one shape (timestamp and context included)
    - Kept out of main.py (ADR: import fan-out < 10)
"""

import logging
import math

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from artiquity.core.errors import (
    ArtiquityError, ErrorCategory, ErrorSeverity, RateLimitExceededError,
    ValidationFailedError,
)
from artiquity.infrastructure.rate_limiter import retry_after_ms

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ArtiquityError, _handle_domain_error)
    app.add_exception_handler(RateLimitExceeded, _handle_rate_limit)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


def _render(exc: ArtiquityError, extra_details: list | None = None) -> JSONResponse:
    body = exc.to_response()
    if extra_details is not None:
        body["error"]["details"] = extra_details
    headers = None
    if exc.http_status == status.HTTP_429_TOO_MANY_REQUESTS and exc.context.retry_after_ms:
        headers = {"Retry-After": str(math.ceil(exc.context.retry_after_ms / 1000))}
    return JSONResponse(status_code=exc.http_status, content=body, headers=headers)


async def _handle_domain_error(request: Request, exc: ArtiquityError) -> JSONResponse:
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.code}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path, "method": request.method},
    )
    return _render(exc)


async def _handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    error = RateLimitExceededError(
        retry_after_ms(request) or exc.limit.limit.get_expiry() * 1000,
    )
    logger.warning(
        f"Rate limit {exc.detail} exceeded on {request.url.path}",
        extra={"error_code": error.code, "path": request.url.path, "method": request.method},
    )
    return _render(error)


async def _handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"] if loc != "body"),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.url.path}: {len(details)} field(s)",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    error = ValidationFailedError(
        "Invalid request data", field=details[0]["field"] if details else None,
    )
    return _render(error, details)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    error = ArtiquityError(
        "An unexpected error occurred", "INTERNAL_ERROR",
        ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return _render(error)
