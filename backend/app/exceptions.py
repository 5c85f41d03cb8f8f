from typing import Optional


class AppError(Exception):
    """Base for every error a flow reports back to the caller."""

    status_code = 500
    default_message = "Internal server error"

    headers: Optional[dict[str, str]] = None

    def __init__(self, message: Optional[str] = None, errors: Optional[list[str]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class DuplicateError(AppError):
    status_code = 400

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} already exists")


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid email or password"


class InvalidOrExpiredToken(AppError):
    status_code = 400
    default_message = "Invalid or expired token"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Authentication required"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class EmailDeliveryError(AppError):
    status_code = 502
    default_message = "Failed to send email"


class InternalError(AppError):
    status_code = 500
