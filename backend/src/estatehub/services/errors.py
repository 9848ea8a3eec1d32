"""Service-layer errors mapped to HTTP responses by the API error handlers."""

from typing import Any


class AppError(Exception):
    """Base class for domain errors.

    Each subclass carries the HTTP status it maps to and a stable ``code``.
    ``errors`` holds per-field details for validation failures.
    """

    status_code: int = 400
    code: str = "bad_request"
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None, *, errors: list[dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    code = "validation_error"
    default_message = "Validation Error"


class AlreadyExists(AppError):
    code = "already_exists"
    default_message = "User already exists"


class AlreadyApproved(AppError):
    code = "already_approved"
    default_message = "Already approved"


class Expired(AppError):
    code = "expired"
    default_message = "Token has expired"


class InvalidCredentials(AppError):
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidOtp(AppError):
    code = "invalid_otp"
    default_message = "Invalid OTP"


class Unauthenticated(AppError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Please login - No Token"


class InvalidToken(AppError):
    status_code = 401
    code = "invalid_token"
    default_message = "Invalid or expired token"


class Revoked(AppError):
    status_code = 403
    code = "revoked"
    default_message = "Invalid or revoked refresh token"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    default_message = "Access denied"


class PendingApproval(AppError):
    status_code = 403
    code = "pending_approval"
    default_message = "Your agent account is pending admin approval. Please wait for approval."


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class RateLimited(AppError):
    status_code = 429
    code = "rate_limited"
    default_message = "Too many requests, please try again later"


class StoreUnavailable(AppError):
    """The ephemeral token store is not reachable. Auth flows fail closed."""

    status_code = 503
    code = "store_unavailable"
    default_message = "Service temporarily unavailable"
