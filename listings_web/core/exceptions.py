"""Application-wide exception hierarchy. Each error knows the status its page is rendered with."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    """One failed field check: dotted field path and a readable message."""

    field: str
    message: str


class AppError(Exception):
    """Base application error with an HTTP status for the error page."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier


class ValidationFailure(AppError):
    """Raised when a submitted payload does not match its schema."""

    status_code = 400

    def __init__(self, errors: list[FieldError]):
        super().__init__(",".join(e.message for e in errors))
        self.errors = errors


class AuthFailure(AppError):
    """Raised when credentials are missing or wrong."""

    status_code = 401


class ConflictError(AppError):
    """Raised when a unique value (e.g. username) is already taken."""

    status_code = 409


class LoginRequired(AppError):
    """Raised by the auth gate when a protected route is hit anonymously."""

    status_code = 401

    def __init__(self, message: str = "login first!"):
        super().__init__(message)
