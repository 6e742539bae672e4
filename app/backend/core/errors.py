"""
Error taxonomy shared by the stores, the REST layer and the API client.

    AppError (base)
    ├── ValidationError          400  missing/empty required field
    ├── InvalidCredentialsError  401  unknown email or wrong password, bad token
    ├── NotFoundError            404  task (or user) id absent for this owner
    ├── DuplicateEmailError      409  signup with an already registered email
    └── NetworkOrStorageError    503  backend unreachable or malformed payload

Every error serializes to the same JSON shape: {"error": "<message>"}.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"


class InvalidCredentialsError(AppError):
    status_code = 401
    default_message = "Invalid email or password"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class DuplicateEmailError(AppError):
    status_code = 409
    default_message = "User already exists"


class NetworkOrStorageError(AppError):
    status_code = 503
    default_message = "Storage unavailable"


ERRORS_BY_STATUS: dict[int, type[AppError]] = {
    cls.status_code: cls
    for cls in (
        ValidationError,
        InvalidCredentialsError,
        NotFoundError,
        DuplicateEmailError,
        NetworkOrStorageError,
    )
}


def error_for_status(status_code: int, message: str | None) -> AppError:
    """Rebuild the typed error for an HTTP error response (client side)."""
    if status_code == 422:
        return ValidationError(message)
    cls = ERRORS_BY_STATUS.get(status_code, NetworkOrStorageError)
    return cls(message)
