"""
Application errors.

Every error raised by the services carries a stable machine-readable code
and the HTTP status the API layer should answer with.
"""

from enum import Enum


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    AD_NOT_FOUND = "AD_NOT_FOUND"
    AD_UNIT_NOT_FOUND = "AD_UNIT_NOT_FOUND"
    CAMPAIGN_NOT_FOUND = "CAMPAIGN_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    LISTING_NOT_FOUND = "LISTING_NOT_FOUND"
    CAMPAIGN_ARCHIVED = "CAMPAIGN_ARCHIVED"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict[str, str]:
        return {
            "error": self.message,
            "message": self.message,
            "code": self.code.value,
        }


class NotFoundError(AppError):
    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class BadRequestError(AppError):
    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR


class UnauthorizedError(AppError):
    status_code = 401
    default_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(AppError):
    status_code = 403
    default_code = ErrorCode.FORBIDDEN
