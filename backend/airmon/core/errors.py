"""
errors.py — Error kinds surfaced by the API

Every failure a handler reports maps onto one of these. `airmon.main` renders
them as `{"success": false, "message": ..., "error"?: ...}` with the matching
HTTP status.
"""

from typing import Optional


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class Unauthorized(ServiceError):
    """Missing or invalid bearer token / API key."""
    status_code = 401


class ValidationError(ServiceError):
    """Missing or malformed input, weak password, business-rule violation."""
    status_code = 400


class NotFound(ServiceError):
    status_code = 404


class InternalError(ServiceError):
    """Unexpected store or hashing failure; `error` carries the cause."""
    status_code = 500
