# services/errors.py
from typing import Any, Optional


class ApiError(Exception):
    """Base error rendered by the app as {"error": ..., "details": ...}."""

    status_code = 500

    def __init__(self, error: str, details: Optional[Any] = None):
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    status_code = 409


class InternalError(ApiError):
    status_code = 500
