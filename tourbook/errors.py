"""
Application exceptions for the tourbook API.

Every failure the OTP workflow can produce has its own exception type with an
error code, an HTTP status and a client-facing message. They are raised by the
services and turned into ``{"success": false, "error": ...}`` bodies by the
exception handler registered in ``tourbook.main``.

Usage:
    from tourbook.errors import InvalidCode

    raise InvalidCode(attempts_left=2)
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine readable error codes."""

    # OTP workflow
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    COOLDOWN_ACTIVE = "COOLDOWN_ACTIVE"
    NOT_FOUND_OR_EXPIRED = "NOT_FOUND_OR_EXPIRED"
    ATTEMPTS_EXHAUSTED = "ATTEMPTS_EXHAUSTED"
    EXPIRED = "EXPIRED"
    INVALID_CODE = "INVALID_CODE"
    DELIVERY_FAILED = "DELIVERY_FAILED"

    # Provisioning
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    REGISTRATION_INVALID = "REGISTRATION_INVALID"

    # Other flows
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    NOT_FOUND = "NOT_FOUND"
    INVALID_DATA = "INVALID_DATA"

    # Framework level
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    HTTP_ERROR = "HTTP_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_IDENTIFIER: "Invalid phone number or email format",
    ErrorCode.COOLDOWN_ACTIVE: "OTP already sent. Please wait before requesting a new one",
    ErrorCode.NOT_FOUND_OR_EXPIRED: "OTP not found or expired",
    ErrorCode.ATTEMPTS_EXHAUSTED: "Too many attempts. Please request a new OTP",
    ErrorCode.EXPIRED: "OTP expired",
    ErrorCode.INVALID_CODE: "Invalid OTP",
    ErrorCode.DELIVERY_FAILED: "Failed to send OTP",
    ErrorCode.USER_ALREADY_EXISTS: "User already exists with this phone/email",
    ErrorCode.DUPLICATE_KEY: "User with this phone/email already exists",
    ErrorCode.REGISTRATION_INVALID: "Invalid registration data",
    ErrorCode.INVALID_CREDENTIALS: "Incorrect email or password",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.INVALID_DATA: "Invalid data",
    ErrorCode.VALIDATION_ERROR: "Validation error",
    ErrorCode.RATE_LIMITED: "Too many requests. Please try again later",
    ErrorCode.HTTP_ERROR: "Request failed",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
}


class TourbookError(Exception):
    """Base exception for all handled tourbook errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or USER_MESSAGES[self.code]
        self.extra = {k: v for k, v in extra.items() if v is not None}
        super().__init__(self.message)

    def to_response(self) -> dict:
        body = {"success": False, "error": self.message, "code": self.code.value}
        body.update(self.extra)
        return body


class InvalidIdentifier(TourbookError):
    code = ErrorCode.INVALID_IDENTIFIER
    status_code = 400


class CooldownActive(TourbookError):
    code = ErrorCode.COOLDOWN_ACTIVE
    status_code = 429

    def __init__(self, retry_after_seconds: int, message: str | None = None):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, retryAfterSeconds=retry_after_seconds)


class NotFoundOrExpired(TourbookError):
    code = ErrorCode.NOT_FOUND_OR_EXPIRED
    status_code = 400


class AttemptsExhausted(TourbookError):
    code = ErrorCode.ATTEMPTS_EXHAUSTED
    status_code = 400


class Expired(TourbookError):
    code = ErrorCode.EXPIRED
    status_code = 400


class InvalidCode(TourbookError):
    code = ErrorCode.INVALID_CODE
    status_code = 400

    def __init__(self, attempts_left: int, message: str | None = None):
        self.attempts_left = attempts_left
        super().__init__(message, attemptsLeft=attempts_left)


class DeliveryFailed(TourbookError):
    code = ErrorCode.DELIVERY_FAILED
    status_code = 502


class UserAlreadyExists(TourbookError):
    code = ErrorCode.USER_ALREADY_EXISTS
    status_code = 409


class DuplicateKey(TourbookError):
    code = ErrorCode.DUPLICATE_KEY
    status_code = 409

    def __init__(self, field: str | None = None):
        self.field = field
        message = f"User with this {field} already exists" if field else None
        super().__init__(message)


class RegistrationInvalid(TourbookError):
    code = ErrorCode.REGISTRATION_INVALID
    status_code = 400


class InvalidCredentials(TourbookError):
    code = ErrorCode.INVALID_CREDENTIALS
    status_code = 401


class NotFound(TourbookError):
    code = ErrorCode.NOT_FOUND
    status_code = 404


class InvalidData(TourbookError):
    code = ErrorCode.INVALID_DATA
    status_code = 422
