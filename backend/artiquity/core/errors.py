"""Error Hierarchy — typed, categorized exceptions for all Artiquity failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the single REST envelope used by every route
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ArtiquityError base: FastAPI global handler catches all (ADR: uniform error shape)
    - OAuth and payment failures use the same envelope with uppercase codes
      instead of RFC 6749 error bodies (ADR: one error shape for the wizard client)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    PAYMENT = "payment"
    RATE_LIMIT = "rate_limit"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource_id: str | None = None
    field: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None
    details: dict[str, Any] | None = None


class ArtiquityError(Exception):
    """Base exception for all Artiquity errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body: dict[str, Any] = {
            "code": self.code,
            "message": self.context.user_message or self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "resource_id": self.context.resource_id,
                "field": self.context.field,
                "retry_after_ms": self.context.retry_after_ms,
            },
        }
        if self.context.details:
            body["details"] = self.context.details
        return {"error": body}


def _with_details(context: ErrorContext | None, **details: Any) -> ErrorContext:
    ctx = context or ErrorContext()
    ctx.details = {**(ctx.details or {}), **details}
    return ctx


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationFailedError(ArtiquityError):
    """Request passed schema validation but violates a domain rule."""
    def __init__(
        self, message: str, field: str | None = None,
        code: str = "VALIDATION_ERROR", context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.field = field


class InvalidRslDocumentError(ArtiquityError):
    """Rendered RSL XML failed structural validation."""
    def __init__(self, errors: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Invalid RSL document: {'; '.join(errors)}",
            "INVALID_RSL_DOCUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, _with_details(context, errors=errors), 400,
        )
        self.errors = errors


class AuthenticationError(ArtiquityError):
    """Missing or unusable credentials."""
    def __init__(
        self, message: str = "Access token required",
        code: str = "UNAUTHORIZED", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidClientError(ArtiquityError):
    """OAuth client authentication failed."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid client credentials", "INVALID_CLIENT",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 401,
        )


class PermissionDeniedError(ArtiquityError):
    """Authenticated caller is not allowed to perform the action."""
    def __init__(
        self, message: str, code: str = "ACCESS_DENIED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(ArtiquityError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str,
        code: str = "RESOURCE_NOT_FOUND", context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type


class PaymentRequiredError(ArtiquityError):
    """Requested permissions carry a payment condition and no payment was supplied."""
    def __init__(
        self, required_permissions: list[str], payment_model: dict | None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "Payment is required for the requested permissions",
            "PAYMENT_REQUIRED", ErrorCategory.PAYMENT, ErrorSeverity.WARNING,
            _with_details(
                context,
                requiredPermissions=required_permissions,
                paymentModel=payment_model,
            ),
            402,
        )


class PaymentFailedError(ArtiquityError):
    """Payment provider rejected the charge or refund."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PAYMENT_FAILED", ErrorCategory.PAYMENT,
            ErrorSeverity.ERROR, context, 402,
        )


class ConflictError(ArtiquityError):
    """Resource already exists or is in an incompatible state."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class PayloadTooLargeError(ArtiquityError):
    """Uploaded file exceeds the configured limit."""
    def __init__(self, size: int, limit: int, context: ErrorContext | None = None):
        super().__init__(
            f"Upload of {size} bytes exceeds limit of {limit} bytes",
            "PAYLOAD_TOO_LARGE", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 413,
        )


class RateLimitExceededError(ArtiquityError):
    """Caller exceeded its request budget for the current window."""
    def __init__(self, retry_after_ms: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            "Too many requests, please try again later",
            "RATE_LIMIT_EXCEEDED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, ctx, 429,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ArtiquityError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ProviderAPIError(ArtiquityError):
    """Upstream AI provider call failed (Gemini, Anthropic, Perplexity, FAL)."""
    def __init__(
        self,
        provider: str,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"{provider} API error ({api_error_type}): {message}",
            "PROVIDER_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.provider = provider
        self.api_error_type = api_error_type


class ProviderNotConfiguredError(ArtiquityError):
    """Route needs a provider whose API key is not set."""
    def __init__(self, provider: str, setting: str, context: ErrorContext | None = None):
        super().__init__(
            f"Server configuration error: {setting.upper()} is missing.",
            "PROVIDER_NOT_CONFIGURED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.provider = provider


class ProviderResponseError(ArtiquityError):
    """Provider answered, but the payload is unusable and there is no fallback."""
    def __init__(self, provider: str, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"{provider} returned an invalid response: {message}",
            "INVALID_PROVIDER_RESPONSE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502,
        )
        self.provider = provider
